from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role stored on user documents."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class WeekDay(str, Enum):
    """Monday-first weekday, matching ISO weekday numbering (Monday=1)."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def iso_number(self) -> int:
        return list(WeekDay).index(self) + 1


class WeekParity(str, Enum):
    """Which weeks of the academic year a recurring slot runs in."""

    ALL = "all"
    ODD = "odd"
    EVEN = "even"

    def matches(self, odd_week: bool) -> bool:
        if self is WeekParity.ALL:
            return True
        if self is WeekParity.ODD:
            return odd_week
        return not odd_week


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"
