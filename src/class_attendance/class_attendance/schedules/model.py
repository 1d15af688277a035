from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from ..core.enums import WeekDay, WeekParity


@dataclass(frozen=True)
class RecurringSlot:
    """Domain entity: a weekly timetable entry."""

    slot_id: str
    subject_id: str
    group_id: str
    teacher_id: str
    day_of_week: WeekDay
    start_time: str
    end_time: str
    classroom: str
    week_parity: WeekParity = WeekParity.ALL
    is_active: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.slot_id,
            "subjectId": self.subject_id,
            "groupId": self.group_id,
            "teacherId": self.teacher_id,
            "dayOfWeek": self.day_of_week.value,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "classroom": self.classroom,
            "weekParity": self.week_parity.value,
            "active": self.is_active,
        }


@dataclass(frozen=True)
class SlotCandidate:
    """The resource/time footprint checked against existing slots."""

    day_of_week: WeekDay
    start_time: str
    end_time: str
    group_id: Optional[str] = None
    teacher_id: Optional[str] = None
    classroom: Optional[str] = None
    week_parity: WeekParity = WeekParity.ALL


@dataclass(frozen=True)
class ConflictResult:
    has_conflict: bool
    conflicts: tuple[RecurringSlot, ...] = ()


@dataclass(frozen=True)
class SlotWriteResult:
    """A created/updated slot plus the conflicts detected (warnings, not errors)."""

    slot: RecurringSlot
    conflicts: tuple[RecurringSlot, ...] = ()

    @property
    def has_conflict(self) -> bool:
        return bool(self.conflicts)


@dataclass(frozen=True)
class ImportResult:
    created: int
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ScheduleStats:
    total: int
    active: int
    inactive: int
    by_day: dict[str, int]
    by_parity: dict[str, int]
    hours_per_week: float


# Wire (camelCase) payload keys -> service keyword arguments.
_PAYLOAD_KEYS = {
    "subjectId": "subject_id",
    "groupId": "group_id",
    "teacherId": "teacher_id",
    "dayOfWeek": "day_of_week",
    "startTime": "start_time",
    "endTime": "end_time",
    "classroom": "classroom",
    "weekParity": "week_parity",
}


def slot_kwargs_from_payload(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Missing keys come back as None (left unchanged on update, rejected on create)."""
    return {py: payload.get(wire) for wire, py in _PAYLOAD_KEYS.items()}
