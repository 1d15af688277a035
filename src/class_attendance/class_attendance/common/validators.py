from __future__ import annotations

from enum import Enum
from typing import Optional, Type, TypeVar

from ..core.constants import MAX_ID_LENGTH, MIN_SLOT_MINUTES
from ..core.exceptions import ValidationError
from .time_utils import duration_minutes, format_time, parse_time

E = TypeVar("E", bound=Enum)


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required", field=field_name)
    return str(value).strip()


def require_id(value: Optional[str], field_name: str) -> str:
    value = require_non_empty(value, field_name)
    if len(value) > MAX_ID_LENGTH:
        raise ValidationError(f"{field_name} is longer than {MAX_ID_LENGTH} characters", field=field_name)
    return value


def require_enum(enum_cls: Type[E], value, field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}", field=field_name) from None


def require_time_range(
    start: str,
    end: str,
    *,
    min_minutes: int = MIN_SLOT_MINUTES,
) -> tuple[str, str]:
    """Validate an 'HH:MM' range and return both ends zero-padded."""
    start_t = parse_time(start, field="startTime")
    end_t = parse_time(end, field="endTime")
    if end_t <= start_t:
        raise ValidationError("End time must be after start time", field="endTime")
    if duration_minutes(start_t, end_t) < min_minutes:
        raise ValidationError(f"Class must last at least {min_minutes} minutes", field="endTime")
    return format_time(start_t), format_time(end_t)


def optional_text(value, field_name: str) -> Optional[str]:
    """Strip free text; blank becomes None. Non-strings are rejected."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string", field=field_name)
    return value.strip() or None
