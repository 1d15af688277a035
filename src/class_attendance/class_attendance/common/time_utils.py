from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Union

from ..core.constants import ACADEMIC_YEAR_START_DAY, ACADEMIC_YEAR_START_MONTH
from ..core.enums import WeekDay
from ..core.exceptions import ValidationError

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


@dataclass(frozen=True, order=True)
class ClockTime:
    hours: int
    minutes: int

    def __str__(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d}"


TimeLike = Union[str, ClockTime]


def parse_time(value: str, *, field: str = "time") -> ClockTime:
    """Parse 'HH:MM' (24h) into ClockTime.

    Raises ValidationError for anything outside 00-23 / 00-59.
    """
    m = _TIME_RE.match((value or "").strip())
    if not m:
        raise ValidationError(f"Invalid time format: {value!r} (expected HH:MM)", field=field)
    hours, minutes = int(m.group(1)), int(m.group(2))
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValidationError(f"Invalid time value: {value!r}", field=field)
    return ClockTime(hours, minutes)


def format_time(value: TimeLike) -> str:
    """Normalize to zero-padded 'HH:MM'."""
    return str(_as_clock(value))


def to_minutes(value: TimeLike) -> int:
    t = _as_clock(value)
    return t.hours * 60 + t.minutes


def duration_minutes(start: TimeLike, end: TimeLike) -> int:
    return to_minutes(end) - to_minutes(start)


def ranges_overlap(a_start: TimeLike, a_end: TimeLike, b_start: TimeLike, b_end: TimeLike) -> bool:
    # Half-open intervals: back-to-back ranges do not overlap.
    return to_minutes(a_start) < to_minutes(b_end) and to_minutes(b_start) < to_minutes(a_end)


def day_of_week(value: date) -> WeekDay:
    return list(WeekDay)[value.isoweekday() - 1]


def academic_year_anchor(
    value: date,
    *,
    start_month: int = ACADEMIC_YEAR_START_MONTH,
    start_day: int = ACADEMIC_YEAR_START_DAY,
) -> date:
    year = value.year if value.month >= start_month else value.year - 1
    return date(year, start_month, start_day)


def is_odd_week(
    value: date,
    *,
    start_month: int = ACADEMIC_YEAR_START_MONTH,
    start_day: int = ACADEMIC_YEAR_START_DAY,
) -> bool:
    """First week of the academic year (counted from the anchor) is odd."""
    anchor = academic_year_anchor(value, start_month=start_month, start_day=start_day)
    weeks_since_anchor = (value - anchor).days // 7
    return weeks_since_anchor % 2 == 0


def parse_iso_date(value: str, *, field: str = "date") -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)", field=field) from None


def format_iso_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def now_local() -> datetime:
    """Current local time; services accept an explicit `now` instead."""
    return datetime.now()


def _as_clock(value: TimeLike) -> ClockTime:
    if isinstance(value, ClockTime):
        return value
    return parse_time(value)
