from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import WeekDay
from .model import RecurringSlot


class RecurringSlotRepository(Protocol):
    def get_by_id(self, slot_id: str) -> Optional[RecurringSlot]:
        raise NotImplementedError

    def list_slots(
        self,
        *,
        day_of_week: Optional[WeekDay] = None,
        group_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
        subject_id: Optional[str] = None,
        active_only: bool = True,
    ) -> Sequence[RecurringSlot]:
        """List slots ordered by weekday (Monday first), then start time."""

        raise NotImplementedError

    def create(self, *, fields: dict) -> RecurringSlot:
        raise NotImplementedError

    def update(self, *, slot_id: str, fields: dict) -> RecurringSlot:
        raise NotImplementedError

    def delete(self, *, slot_id: str) -> bool:
        raise NotImplementedError
