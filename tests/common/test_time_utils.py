from __future__ import annotations

from datetime import date, timedelta

import pytest

from class_attendance.common.time_utils import (
    academic_year_anchor,
    day_of_week,
    format_time,
    is_odd_week,
    parse_iso_date,
    parse_time,
    ranges_overlap,
)
from class_attendance.common.validators import optional_text, require_enum, require_id, require_time_range
from class_attendance.core.enums import WeekDay, WeekParity
from class_attendance.core.exceptions import ValidationError


def test_back_to_back_ranges_do_not_overlap():
    assert ranges_overlap("09:00", "10:30", "10:30", "12:00") is False
    assert ranges_overlap("10:30", "12:00", "09:00", "10:30") is False


def test_partial_and_nested_ranges_overlap():
    assert ranges_overlap("09:00", "10:30", "10:00", "11:00") is True
    assert ranges_overlap("09:00", "12:00", "10:00", "11:00") is True
    assert ranges_overlap("9:00", "10:30", "9:00", "10:30") is True
    assert ranges_overlap("9:00", "10:00", "09:59", "11:00") is True


def test_parse_time_normalizes_and_rejects_out_of_range():
    assert format_time("9:05") == "09:05"
    with pytest.raises(ValidationError):
        parse_time("24:00")
    with pytest.raises(ValidationError):
        parse_time("10:60")
    with pytest.raises(ValidationError):
        parse_time("ten")


def test_week_parity_counts_from_september_first():
    # 2025-09-01 is a Monday and opens the academic year.
    assert is_odd_week(date(2025, 9, 1)) is True
    assert is_odd_week(date(2025, 9, 7)) is True
    assert is_odd_week(date(2025, 9, 8)) is False
    assert is_odd_week(date(2025, 9, 15)) is True


def test_week_parity_alternates_weekly_and_repeats_every_two_weeks():
    start = date(2025, 9, 1)
    for offset in range(60):
        d = start + timedelta(days=offset)
        assert is_odd_week(d + timedelta(days=14)) == is_odd_week(d)
        assert is_odd_week(d + timedelta(days=7)) != is_odd_week(d)


def test_dates_before_september_belong_to_previous_academic_year():
    assert academic_year_anchor(date(2026, 1, 5)) == date(2025, 9, 1)
    assert academic_year_anchor(date(2025, 9, 1)) == date(2025, 9, 1)
    # Week index 18 from the anchor (126 days): even index, so an odd week.
    assert is_odd_week(date(2026, 1, 5)) is True
    # Week index 19 (133 days): an even week.
    assert is_odd_week(date(2026, 1, 12)) is False


def test_day_of_week_is_monday_first():
    assert day_of_week(date(2025, 9, 1)) is WeekDay.MONDAY
    assert day_of_week(date(2025, 9, 7)) is WeekDay.SUNDAY
    assert WeekDay.SUNDAY.iso_number == 7


def test_parity_matching():
    assert WeekParity.ALL.matches(True) and WeekParity.ALL.matches(False)
    assert WeekParity.ODD.matches(True) and not WeekParity.ODD.matches(False)
    assert WeekParity.EVEN.matches(False) and not WeekParity.EVEN.matches(True)


def test_time_range_validation():
    assert require_time_range("9:00", "10:30") == ("09:00", "10:30")
    with pytest.raises(ValidationError) as exc:
        require_time_range("10:00", "09:00")
    assert exc.value.field == "endTime"
    with pytest.raises(ValidationError):
        require_time_range("09:00", "09:20")


def test_id_and_enum_validation():
    assert require_id("  g1 ", "groupId") == "g1"
    with pytest.raises(ValidationError):
        require_id("", "groupId")
    with pytest.raises(ValidationError):
        require_id("x" * 37, "groupId")

    assert require_enum(WeekDay, "Monday", "dayOfWeek") is WeekDay.MONDAY
    with pytest.raises(ValidationError) as exc:
        require_enum(WeekDay, "funday", "dayOfWeek")
    assert exc.value.field == "dayOfWeek"


def test_parse_iso_date():
    assert parse_iso_date("2025-09-01") == date(2025, 9, 1)
    with pytest.raises(ValidationError):
        parse_iso_date("01.09.2025")


def test_optional_text():
    assert optional_text("  note ", "notes") == "note"
    assert optional_text("   ", "notes") is None
    assert optional_text(None, "notes") is None
    with pytest.raises(ValidationError) as exc:
        optional_text(5, "notes")
    assert exc.value.field == "notes"
