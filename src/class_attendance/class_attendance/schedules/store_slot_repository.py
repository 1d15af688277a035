from __future__ import annotations

from typing import Optional, Sequence

from ..common.time_utils import format_time
from ..core.constants import SLOTS_COLLECTION
from ..core.enums import WeekDay, WeekParity
from ..database.mapping import as_bool, required
from ..database.store import Document, DocumentStore, Eq, OrderBy
from .model import RecurringSlot
from .repository import RecurringSlotRepository


def slot_from_document(doc: Document) -> RecurringSlot:
    return RecurringSlot(
        slot_id=required(doc, "id", "RecurringSlot"),
        subject_id=required(doc, "subjectId", "RecurringSlot"),
        group_id=required(doc, "groupId", "RecurringSlot"),
        teacher_id=required(doc, "teacherId", "RecurringSlot"),
        day_of_week=required(doc, "dayOfWeek", "RecurringSlot", WeekDay),
        start_time=required(doc, "startTime", "RecurringSlot", format_time),
        end_time=required(doc, "endTime", "RecurringSlot", format_time),
        classroom=str(doc.get("classroom") or ""),
        week_parity=WeekParity(doc.get("weekParity") or WeekParity.ALL.value),
        is_active=as_bool(doc.get("active", True)),
    )


def _timetable_order(slot: RecurringSlot) -> tuple[int, str]:
    return slot.day_of_week.iso_number, slot.start_time


class StoreRecurringSlotRepository(RecurringSlotRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get_by_id(self, slot_id: str) -> Optional[RecurringSlot]:
        doc = self._store.get(SLOTS_COLLECTION, slot_id)
        return slot_from_document(doc) if doc else None

    def list_slots(
        self,
        *,
        day_of_week: Optional[WeekDay] = None,
        group_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
        subject_id: Optional[str] = None,
        active_only: bool = True,
    ) -> Sequence[RecurringSlot]:
        filters = []
        if day_of_week is not None:
            filters.append(Eq("dayOfWeek", day_of_week.value))
        if group_id:
            filters.append(Eq("groupId", group_id))
        if teacher_id:
            filters.append(Eq("teacherId", teacher_id))
        if subject_id:
            filters.append(Eq("subjectId", subject_id))
        if active_only:
            filters.append(Eq("active", True))

        docs = self._store.list(SLOTS_COLLECTION, filters, [OrderBy("startTime")])
        slots = [slot_from_document(d) for d in docs]
        # Weekday names do not sort alphabetically into Monday-first order.
        slots.sort(key=_timetable_order)
        return slots

    def create(self, *, fields: dict) -> RecurringSlot:
        return slot_from_document(self._store.create(SLOTS_COLLECTION, fields))

    def update(self, *, slot_id: str, fields: dict) -> RecurringSlot:
        return slot_from_document(self._store.update(SLOTS_COLLECTION, slot_id, fields))

    def delete(self, *, slot_id: str) -> bool:
        return self._store.delete(SLOTS_COLLECTION, slot_id)
