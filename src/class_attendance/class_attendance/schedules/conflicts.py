"""Conflict detection for recurring slots.

Two slots collide when they share the weekday, their time ranges overlap
(half-open: a slot ending at 10:30 does not collide with one starting at 10:30)
and they share at least one resource: group, teacher or classroom.

Week parity is not used to narrow conflicts: an "odd" and an "even" slot on
the same day/time/resource are reported as conflicting.

The check is read-then-decide: two concurrent creations can both pass it.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Union

from ..common.time_utils import day_of_week, format_time, ranges_overlap
from .model import ConflictResult, RecurringSlot, SlotCandidate
from .repository import RecurringSlotRepository

logger = logging.getLogger(__name__)

Candidate = Union[SlotCandidate, RecurringSlot]


def _same(a: Optional[str], b: Optional[str]) -> bool:
    if not a or not b:
        return False
    return a.strip() == b.strip()


def shares_resource(candidate: Candidate, slot: RecurringSlot) -> bool:
    return (
        _same(candidate.group_id, slot.group_id)
        or _same(candidate.teacher_id, slot.teacher_id)
        or _same(candidate.classroom, slot.classroom)
    )


def candidate_for_session(
    *,
    session_date: date,
    start_time: str,
    end_time: str,
    group_id: Optional[str] = None,
    teacher_id: Optional[str] = None,
    classroom: Optional[str] = None,
) -> SlotCandidate:
    """Footprint of a dated ad-hoc session on the weekly timetable."""
    return SlotCandidate(
        day_of_week=day_of_week(session_date),
        start_time=format_time(start_time),
        end_time=format_time(end_time),
        group_id=group_id,
        teacher_id=teacher_id,
        classroom=classroom,
    )


class ConflictDetector:
    def __init__(self, slots: RecurringSlotRepository):
        self._slots = slots

    def check_conflict(self, candidate: Candidate, *, exclude_id: Optional[str] = None) -> ConflictResult:
        # Full weekday scan; narrowing by group here would miss teacher/classroom clashes.
        existing = self._slots.list_slots(day_of_week=candidate.day_of_week, active_only=True)

        conflicts = []
        for slot in existing:
            if exclude_id and slot.slot_id == exclude_id:
                continue
            if not ranges_overlap(candidate.start_time, candidate.end_time, slot.start_time, slot.end_time):
                continue
            if shares_resource(candidate, slot):
                conflicts.append(slot)

        if conflicts:
            logger.warning(
                "Conflict on %s %s-%s with %d slot(s): %s",
                candidate.day_of_week.value,
                candidate.start_time,
                candidate.end_time,
                len(conflicts),
                ", ".join(s.slot_id for s in conflicts),
            )

        return ConflictResult(has_conflict=bool(conflicts), conflicts=tuple(conflicts))
