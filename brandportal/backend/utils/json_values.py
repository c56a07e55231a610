"""Checks for values stored in JSON columns."""
from __future__ import annotations

import json
from typing import Any

from brandportal.errors import ValidationError


def ensure_json_value(value: Any, *, what: str = "value") -> Any:
    """Reject values that would not survive a JSON round trip (NaN, sets, objects)."""
    try:
        json.dumps(value, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{what} must be JSON-serializable: {e}")
    return value


def require_name(raw: str | None, *, what: str, max_len: int = 255) -> str:
    name = (raw or "").strip()
    if not name:
        raise ValidationError(f"{what} must not be empty")
    if len(name) > max_len:
        raise ValidationError(f"{what} is longer than {max_len} characters")
    return name
