from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceMark


class AttendanceRepository(Protocol):
    def get_by_id(self, mark_id: str) -> Optional[AttendanceMark]:
        raise NotImplementedError

    def find(self, *, session_id: str, student_id: str) -> Optional[AttendanceMark]:
        raise NotImplementedError

    def list_for_session(self, session_id: str) -> Sequence[AttendanceMark]:
        raise NotImplementedError

    def list_for_student(
        self,
        student_id: str,
        *,
        marked_from: Optional[date] = None,
        marked_to: Optional[date] = None,
    ) -> Sequence[AttendanceMark]:
        """Marks of a student, newest first; the range applies to markedAt (inclusive days)."""

        raise NotImplementedError

    def create(self, *, fields: dict) -> AttendanceMark:
        raise NotImplementedError

    def update(self, *, mark_id: str, fields: dict) -> AttendanceMark:
        raise NotImplementedError

    def delete(self, *, mark_id: str) -> bool:
        raise NotImplementedError
