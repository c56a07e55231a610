"""Generic editor for one content section.

Drafts are kept per top-level identifier. Saving sends the complete value
of one identifier; identifiers succeed or fail independently.
"""
from __future__ import annotations

import copy
import logging
import threading
from dataclasses import dataclass
from typing import Any, Mapping

from brandportal.errors import PortalError, ValidationError
from brandportal.web.api_client import CONTENT
from brandportal.web.content_model import (
    SHORT_TEXT_LIMIT,
    FieldForm,
    ListContent,
    StructuredContent,
    classify,
    parse_json_text,
    render_field,
)

logger = logging.getLogger(__name__)

_UNSET = object()


@dataclass(frozen=True)
class SaveResult:
    identifier: str
    ok: bool
    error: PortalError | None = None
    busy: bool = False
    skipped: bool = False


class ContentEditor:
    def __init__(
        self,
        context,
        section: str,
        defaults: Mapping[str, Any] | None = None,
        *,
        short_text_limit: int = SHORT_TEXT_LIMIT,
    ) -> None:
        self.context = context
        self.section = section
        self.defaults = dict(defaults or {})
        self.short_text_limit = short_text_limit
        self.errors: dict[str, PortalError] = {}
        self._drafts: dict[str, Any] = {}
        self._json_drafts: dict[str, str] = {}
        self._confirmed: dict[str, Any] = {}
        self._saving: set[str] = set()
        self._lock = threading.Lock()
        self._subscription = None

    # loading

    def load(self) -> None:
        if self._subscription is None:
            self._subscription = self.context.subscribe(CONTENT, self._on_content)

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None

    @property
    def loading(self) -> bool:
        return self._subscription is not None and self._subscription.loading

    @property
    def load_error(self) -> PortalError | None:
        return self._subscription.error if self._subscription is not None else None

    def _on_content(self, sub) -> None:
        if not sub.loading and sub.error is None:
            # fresh server state supersedes locally confirmed writes
            self._confirmed.clear()

    def _server_section(self) -> dict[str, Any]:
        grouped = self._subscription.value if self._subscription is not None else None
        return dict((grouped or {}).get(self.section) or {})

    def saved_values(self) -> dict[str, Any]:
        """Last-fetched server state for this section, over the defaults."""
        values = dict(self.defaults)
        values.update(self._server_section())
        values.update(self._confirmed)
        return values

    def value(self, identifier: str) -> Any:
        if identifier in self._drafts:
            return self._drafts[identifier]
        return copy.deepcopy(self.saved_values().get(identifier))

    def identifiers(self) -> list[str]:
        ids = list(self.saved_values())
        ids.extend(i for i in self._drafts if i not in ids)
        return ids

    # rendering

    def fields(self) -> list[FieldForm]:
        out = []
        for identifier in self.identifiers():
            form = render_field(
                identifier,
                classify(self.value(identifier)),
                json_text=self._json_drafts.get(identifier),
                limit=self.short_text_limit,
            )
            form.dirty = self.is_dirty(identifier)
            form.saving = self.is_saving(identifier)
            err = self.errors.get(identifier)
            form.error = err.message if err else None
            out.append(form)
        return out

    # editing

    def set_text(self, identifier: str, value: str) -> None:
        if not isinstance(value, str):
            raise ValidationError(f"{identifier}: text value expected")
        self._drafts[identifier] = value

    def set_record_field(self, identifier: str, index: int, field: str, value: Any) -> None:
        current = self.value(identifier)
        if not isinstance(classify(current), ListContent):
            raise ValidationError(f"{identifier} is not a list of records")
        items = [dict(item) for item in current]
        if not 0 <= index < len(items):
            raise ValidationError(f"{identifier}: no item {index + 1}")
        items[index][field] = value
        self._drafts[identifier] = items

    def set_json_text(self, identifier: str, text: str) -> None:
        """Raw JSON edit; parsed only when saved."""
        if not isinstance(classify(self.value(identifier)), StructuredContent):
            raise ValidationError(f"{identifier} is not a structured value")
        self._json_drafts[identifier] = text

    def is_dirty(self, identifier: str) -> bool:
        return identifier in self._drafts or identifier in self._json_drafts

    @property
    def has_changes(self) -> bool:
        return bool(self._drafts) or bool(self._json_drafts)

    def is_saving(self, identifier: str) -> bool:
        return identifier in self._saving

    def dirty_identifiers(self) -> list[str]:
        return [i for i in self.identifiers() if self.is_dirty(i)]

    # persisting

    def _pending_value(self, identifier: str) -> Any:
        if identifier in self._json_drafts:
            return parse_json_text(self._json_drafts[identifier])
        return self._drafts[identifier]

    def save(self, identifier: str) -> SaveResult:
        with self._lock:
            if identifier in self._saving:
                return SaveResult(identifier, ok=False, busy=True)
            if not self.is_dirty(identifier):
                return SaveResult(identifier, ok=True, skipped=True)
            try:
                value = self._pending_value(identifier)
            except ValidationError as e:
                # last good value stays in place; nothing is sent
                self.errors[identifier] = e
                return SaveResult(identifier, ok=False, error=e)
            sent_draft = self._drafts.get(identifier, _UNSET)
            sent_json = self._json_drafts.get(identifier, _UNSET)
            self._saving.add(identifier)
        try:
            self.context.update_content(self.section, identifier, value)
        except PortalError as e:
            self.errors[identifier] = e
            logger.warning("content save failed section=%s identifier=%s: %s", self.section, identifier, e.message)
            return SaveResult(identifier, ok=False, error=e)
        finally:
            with self._lock:
                self._saving.discard(identifier)
        with self._lock:
            self._confirmed[identifier] = value
            # edits made while the write was in flight stay as drafts
            if self._drafts.get(identifier, _UNSET) is sent_draft:
                self._drafts.pop(identifier, None)
            if self._json_drafts.get(identifier, _UNSET) is sent_json:
                self._json_drafts.pop(identifier, None)
            self.errors.pop(identifier, None)
        return SaveResult(identifier, ok=True)

    def save_all(self) -> dict[str, SaveResult]:
        return {identifier: self.save(identifier) for identifier in self.dirty_identifiers()}

    def reset(self) -> None:
        """Drop every draft and show the last-fetched server state again."""
        self._drafts.clear()
        self._json_drafts.clear()
        self.errors.clear()
