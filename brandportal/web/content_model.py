"""Content values as a tagged variant, and the edit form each variant gets.

Stored content is schema-less JSON. `classify` decides the shape once:
strings are `TextContent`, lists whose every element is a mapping are
`ListContent`, anything else is `StructuredContent` and is edited as a JSON
block.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Union

from brandportal.errors import ValidationError

SHORT_TEXT_LIMIT = 100


@dataclass(frozen=True)
class TextContent:
    value: str
    kind: Literal["text"] = "text"

    def is_short(self, limit: int = SHORT_TEXT_LIMIT) -> bool:
        return len(self.value) < limit


@dataclass(frozen=True)
class ListContent:
    items: tuple[Mapping[str, Any], ...]
    kind: Literal["list"] = "list"


@dataclass(frozen=True)
class StructuredContent:
    value: Any
    kind: Literal["structured"] = "structured"


ContentValue = Union[TextContent, ListContent, StructuredContent]


def classify(value: Any) -> ContentValue:
    if isinstance(value, str):
        return TextContent(value)
    if isinstance(value, (list, tuple)) and all(isinstance(item, Mapping) for item in value):
        return ListContent(tuple(dict(item) for item in value))
    return StructuredContent(value)


def to_json_text(value: Any) -> str:
    return json.dumps(value if value is not None else {}, indent=2, ensure_ascii=False)


def parse_json_text(text: str) -> Any:
    """Parse an edited JSON block; malformed input is a ValidationError."""
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON at line {e.lineno} column {e.colno}: {e.msg}")


def label_for(name: str) -> str:
    return name[:1].upper() + name[1:]


@dataclass
class InputField:
    name: str
    label: str
    widget: str  # input|textarea
    value: Any


@dataclass
class RecordForm:
    index: int
    title: str
    fields: list[InputField] = field(default_factory=list)


@dataclass
class FieldForm:
    identifier: str
    label: str
    kind: str  # text|list|structured
    widget: str  # input|textarea|records|json
    value: Any = None
    text: str | None = None
    records: list[RecordForm] = field(default_factory=list)
    dirty: bool = False
    saving: bool = False
    error: str | None = None


def _text_widget(value: Any, limit: int) -> str:
    return "textarea" if isinstance(value, str) and len(value) > limit else "input"


def render_field(
    identifier: str,
    content: ContentValue,
    *,
    json_text: str | None = None,
    limit: int = SHORT_TEXT_LIMIT,
) -> FieldForm:
    """Form description for one top-level content identifier."""
    label = label_for(identifier)
    if isinstance(content, TextContent):
        widget = "input" if content.is_short(limit) else "textarea"
        return FieldForm(identifier, label, content.kind, widget, value=content.value)
    if isinstance(content, ListContent):
        records = [
            RecordForm(
                index=i,
                title=f"Item {i + 1}",
                fields=[
                    InputField(name, label_for(name), _text_widget(value, limit), value)
                    for name, value in item.items()
                ],
            )
            for i, item in enumerate(content.items)
        ]
        return FieldForm(identifier, label, content.kind, "records", value=[dict(i) for i in content.items],
                         records=records)
    text = json_text if json_text is not None else to_json_text(content.value)
    return FieldForm(identifier, label, content.kind, "json", value=content.value, text=text)
