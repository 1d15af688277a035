from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..common.time_utils import duration_minutes
from ..common.validators import optional_text, require_enum, require_id, require_time_range
from ..core.enums import WeekDay, WeekParity
from ..core.exceptions import ConflictError, DomainError, NotFoundError, ValidationError
from ..sessions.repository import SessionRepository
from .conflicts import ConflictDetector
from .model import (
    ConflictResult,
    ImportResult,
    RecurringSlot,
    ScheduleStats,
    SlotCandidate,
    SlotWriteResult,
    slot_kwargs_from_payload,
)
from .repository import RecurringSlotRepository

logger = logging.getLogger(__name__)


class ScheduleService:
    """Recurring timetable management.

    Conflicts are returned as warnings unless the caller passes
    block_on_conflict=True, in which case ConflictError is raised and nothing
    is written.
    """

    def __init__(
        self,
        slots: RecurringSlotRepository,
        detector: ConflictDetector,
        sessions: Optional[SessionRepository] = None,
    ):
        self._slots = slots
        self._detector = detector
        self._sessions = sessions

    def _normalize(
        self,
        *,
        subject_id: str,
        group_id: str,
        teacher_id: str,
        day_of_week,
        start_time: str,
        end_time: str,
        classroom: Optional[str],
        week_parity,
    ) -> dict:
        start_time, end_time = require_time_range(start_time, end_time)
        return {
            "subjectId": require_id(subject_id, "subjectId"),
            "groupId": require_id(group_id, "groupId"),
            "teacherId": require_id(teacher_id, "teacherId"),
            "dayOfWeek": require_enum(WeekDay, day_of_week, "dayOfWeek").value,
            "startTime": start_time,
            "endTime": end_time,
            "classroom": optional_text(classroom, "classroom") or "",
            "weekParity": require_enum(WeekParity, week_parity or WeekParity.ALL, "weekParity").value,
        }

    def _candidate(self, fields: dict) -> SlotCandidate:
        return SlotCandidate(
            day_of_week=WeekDay(fields["dayOfWeek"]),
            start_time=fields["startTime"],
            end_time=fields["endTime"],
            group_id=fields["groupId"],
            teacher_id=fields["teacherId"],
            classroom=fields["classroom"],
            week_parity=WeekParity(fields["weekParity"]),
        )

    def check_conflict(
        self,
        *,
        day_of_week,
        start_time: str,
        end_time: str,
        group_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
        classroom: Optional[str] = None,
        exclude_id: Optional[str] = None,
    ) -> ConflictResult:
        start_time, end_time = require_time_range(start_time, end_time)
        candidate = SlotCandidate(
            day_of_week=require_enum(WeekDay, day_of_week, "dayOfWeek"),
            start_time=start_time,
            end_time=end_time,
            group_id=group_id,
            teacher_id=teacher_id,
            classroom=classroom,
        )
        return self._detector.check_conflict(candidate, exclude_id=exclude_id)

    def get_slot(self, slot_id: str) -> RecurringSlot:
        slot = self._slots.get_by_id(require_id(slot_id, "slotId"))
        if not slot:
            raise NotFoundError("RecurringSlot", slot_id)
        return slot

    def create_slot(
        self,
        *,
        subject_id: str,
        group_id: str,
        teacher_id: str,
        day_of_week,
        start_time: str,
        end_time: str,
        classroom: Optional[str] = "",
        week_parity=WeekParity.ALL,
        block_on_conflict: bool = False,
    ) -> SlotWriteResult:
        fields = self._normalize(
            subject_id=subject_id,
            group_id=group_id,
            teacher_id=teacher_id,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
            classroom=classroom,
            week_parity=week_parity,
        )
        result = self._detector.check_conflict(self._candidate(fields))
        if result.has_conflict and block_on_conflict:
            raise ConflictError(result.conflicts)

        slot = self._slots.create(fields={**fields, "active": True})
        logger.info(
            "Slot %s created: %s %s-%s group=%s teacher=%s",
            slot.slot_id,
            slot.day_of_week.value,
            slot.start_time,
            slot.end_time,
            slot.group_id,
            slot.teacher_id,
        )
        return SlotWriteResult(slot=slot, conflicts=result.conflicts)

    def update_slot(self, slot_id: str, *, block_on_conflict: bool = False, **changes: Any) -> SlotWriteResult:
        current = self.get_slot(slot_id)
        merged = {
            "subject_id": current.subject_id,
            "group_id": current.group_id,
            "teacher_id": current.teacher_id,
            "day_of_week": current.day_of_week,
            "start_time": current.start_time,
            "end_time": current.end_time,
            "classroom": current.classroom,
            "week_parity": current.week_parity,
        }
        unknown = set(changes) - set(merged)
        if unknown:
            raise ValidationError(f"Unknown slot field(s): {', '.join(sorted(unknown))}")
        merged.update({k: v for k, v in changes.items() if v is not None})

        fields = self._normalize(**merged)
        result = self._detector.check_conflict(self._candidate(fields), exclude_id=current.slot_id)
        if result.has_conflict and block_on_conflict:
            raise ConflictError(result.conflicts)

        slot = self._slots.update(slot_id=current.slot_id, fields=fields)
        logger.info("Slot %s updated", slot.slot_id)
        return SlotWriteResult(slot=slot, conflicts=result.conflicts)

    def deactivate_slot(self, slot_id: str) -> RecurringSlot:
        current = self.get_slot(slot_id)
        slot = self._slots.update(slot_id=current.slot_id, fields={"active": False})
        logger.info("Slot %s deactivated", slot.slot_id)
        return slot

    def activate_slot(self, slot_id: str) -> RecurringSlot:
        current = self.get_slot(slot_id)
        slot = self._slots.update(slot_id=current.slot_id, fields={"active": True})
        logger.info("Slot %s activated", slot.slot_id)
        return slot

    def delete_slot(self, slot_id: str) -> None:
        current = self.get_slot(slot_id)
        if self._sessions and self._sessions.list_sessions(slot_id=current.slot_id):
            raise ValidationError(
                "Slot has stored sessions; deactivate it instead of deleting",
                field="slotId",
            )
        if not self._slots.delete(slot_id=current.slot_id):
            raise NotFoundError("RecurringSlot", slot_id)
        logger.info("Slot %s deleted", current.slot_id)

    def list_slots(self, *, active_only: bool = True) -> Sequence[RecurringSlot]:
        return self._slots.list_slots(active_only=active_only)

    def slots_for_group(self, group_id: str) -> Sequence[RecurringSlot]:
        return self._slots.list_slots(group_id=require_id(group_id, "groupId"))

    def slots_for_teacher(self, teacher_id: str) -> Sequence[RecurringSlot]:
        return self._slots.list_slots(teacher_id=require_id(teacher_id, "teacherId"))

    def slots_for_subject(self, subject_id: str) -> Sequence[RecurringSlot]:
        return self._slots.list_slots(subject_id=require_id(subject_id, "subjectId"))

    def slots_for_day(
        self,
        day_of_week,
        *,
        group_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
    ) -> Sequence[RecurringSlot]:
        return self._slots.list_slots(
            day_of_week=require_enum(WeekDay, day_of_week, "dayOfWeek"),
            group_id=group_id,
            teacher_id=teacher_id,
        )

    def schedule_stats(self) -> ScheduleStats:
        slots = self._slots.list_slots(active_only=False)
        active = [s for s in slots if s.is_active]

        by_day = Counter(s.day_of_week.value for s in slots)
        by_parity = Counter(s.week_parity.value for s in slots)

        # Odd/even slots run every other week.
        hours = sum(
            duration_minutes(s.start_time, s.end_time) / 60 * (1 if s.week_parity is WeekParity.ALL else 0.5)
            for s in active
        )
        return ScheduleStats(
            total=len(slots),
            active=len(active),
            inactive=len(slots) - len(active),
            by_day=dict(by_day),
            by_parity=dict(by_parity),
            hours_per_week=round(hours, 1),
        )

    def import_slots(self, rows: Iterable[Mapping[str, Any]]) -> ImportResult:
        """Create slots row by row; conflicting or invalid rows are reported, not created."""
        created = 0
        errors: list[str] = []
        for index, row in enumerate(rows, start=1):
            try:
                self.create_slot(**slot_kwargs_from_payload(row), block_on_conflict=True)
                created += 1
            except ConflictError:
                errors.append(f"Row {index}: schedule conflict, time is already taken")
            except DomainError as e:
                errors.append(f"Row {index}: {e}")

        logger.info("Imported %d slot(s), %d row(s) rejected", created, len(errors))
        return ImportResult(created=created, errors=errors)
