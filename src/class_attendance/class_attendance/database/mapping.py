"""Helpers for turning loosely typed store documents into domain types."""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar

from ..core.exceptions import InvalidDocumentError, ValidationError
from .store import Document

T = TypeVar("T")


def required(doc: Document, field: str, kind: str, convert: Callable[[Any], T] = str) -> T:
    value = doc.get(field)
    if value is None or value == "":
        raise InvalidDocumentError(f"{kind} {doc.get('id', '?')} is missing required field {field!r}")
    try:
        return convert(value)
    except (AttributeError, TypeError, ValueError, ValidationError) as e:
        raise InvalidDocumentError(f"{kind} {doc.get('id', '?')} has invalid {field!r}: {value!r}") from e


def optional(doc: Document, field: str, convert: Callable[[Any], T] = str) -> Optional[T]:
    value = doc.get(field)
    if value is None or value == "":
        return None
    return convert(value)


def as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return bool(value)
