from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import PersistedSession


class SessionRepository(Protocol):
    def get_by_id(self, session_id: str) -> Optional[PersistedSession]:
        raise NotImplementedError

    def find_by_slot_and_date(self, *, slot_id: str, session_date: date) -> Optional[PersistedSession]:
        raise NotImplementedError

    def find_by_virtual_id(self, virtual_id: str) -> Optional[PersistedSession]:
        raise NotImplementedError

    def list_sessions(
        self,
        *,
        session_date: Optional[date] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        teacher_id: Optional[str] = None,
        group_id: Optional[str] = None,
        subject_id: Optional[str] = None,
        slot_id: Optional[str] = None,
    ) -> Sequence[PersistedSession]:
        """List stored sessions ordered by date, then start time."""

        raise NotImplementedError

    def create(self, *, fields: dict) -> PersistedSession:
        raise NotImplementedError

    def update(self, *, session_id: str, fields: dict) -> PersistedSession:
        raise NotImplementedError
