from __future__ import annotations

from typing import Any, Optional, Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(DomainError):
    """Raised when a referenced record is absent and that indicates a broken reference."""

    def __init__(self, kind: str, record_id: str):
        super().__init__(f"{kind} not found: {record_id}")
        self.kind = kind
        self.record_id = record_id


class ConflictError(DomainError):
    """Raised when a recurring slot collides with existing ones and the caller asked to block."""

    def __init__(self, conflicts: Sequence[Any]):
        super().__init__(f"Schedule conflict with {len(conflicts)} existing slot(s)")
        self.conflicts = list(conflicts)


class InvalidDocumentError(DomainError):
    """Raised when a stored document lacks fields required by its domain type."""


class StoreUnavailable(Exception):
    """Transport or backend failure of the document store.

    Not a DomainError: callers must surface it and may retry.
    """
