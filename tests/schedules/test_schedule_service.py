from __future__ import annotations

from datetime import date

import pytest

from class_attendance.core.enums import WeekDay, WeekParity
from class_attendance.core.exceptions import NotFoundError, ValidationError
from class_attendance.sessions.model import SessionOwner


def test_create_slot_normalizes_input(container):
    result = container.schedule_service.create_slot(
        subject_id="math",
        group_id="g1",
        teacher_id="t1",
        day_of_week="Wednesday",
        start_time="8:00",
        end_time="9:30",
        classroom=" 101 ",
        week_parity="EVEN",
    )

    slot = result.slot
    assert slot.day_of_week is WeekDay.WEDNESDAY
    assert (slot.start_time, slot.end_time) == ("08:00", "09:30")
    assert slot.classroom == "101"
    assert slot.week_parity is WeekParity.EVEN
    assert slot.is_active is True
    assert result.has_conflict is False


def test_create_slot_rejects_invalid_input(container):
    service = container.schedule_service
    with pytest.raises(ValidationError):
        service.create_slot(
            subject_id="math", group_id="g1", teacher_id="t1",
            day_of_week="funday", start_time="09:00", end_time="10:00",
        )
    with pytest.raises(ValidationError):
        service.create_slot(
            subject_id="math", group_id="g1", teacher_id="t1",
            day_of_week="monday", start_time="09:00", end_time="09:15",
        )
    with pytest.raises(ValidationError):
        service.create_slot(
            subject_id=None, group_id="g1", teacher_id="t1",
            day_of_week="monday", start_time="09:00", end_time="10:00",
        )


def test_update_slot_merges_changes_and_ignores_none(container, make_slot):
    slot = make_slot()

    result = container.schedule_service.update_slot(slot.slot_id, start_time="11:00", end_time="12:30", classroom=None)

    assert (result.slot.start_time, result.slot.end_time) == ("11:00", "12:30")
    assert result.slot.classroom == "101"


def test_update_slot_rejects_unknown_fields(container, make_slot):
    slot = make_slot()
    with pytest.raises(ValidationError):
        container.schedule_service.update_slot(slot.slot_id, colour="red")


def test_update_does_not_conflict_with_itself(container, make_slot):
    slot = make_slot()
    result = container.schedule_service.update_slot(slot.slot_id, end_time="11:00")
    assert result.has_conflict is False


def test_get_missing_slot_raises(container):
    with pytest.raises(NotFoundError):
        container.schedule_service.get_slot("missing")


def test_delete_slot_refuses_when_sessions_are_stored(container, make_slot):
    slot = make_slot()
    session = container.session_service.sessions_for_date(SessionOwner(group_id="g1"), date(2025, 9, 1))[0]
    container.session_service.ensure_persisted(session)

    with pytest.raises(ValidationError):
        container.schedule_service.delete_slot(slot.slot_id)

    other = make_slot(day_of_week="friday")
    container.schedule_service.delete_slot(other.slot_id)
    with pytest.raises(NotFoundError):
        container.schedule_service.get_slot(other.slot_id)


def test_listing_is_monday_first_and_filters_inactive(container, make_slot):
    friday = make_slot(day_of_week="friday")
    make_slot(day_of_week="tuesday", start_time="12:00", end_time="13:00")
    make_slot(day_of_week="monday", start_time="14:00", end_time="15:00")
    container.schedule_service.deactivate_slot(friday.slot_id)

    days = [s.day_of_week for s in container.schedule_service.list_slots()]
    assert days == [WeekDay.MONDAY, WeekDay.TUESDAY]
    assert len(container.schedule_service.list_slots(active_only=False)) == 3

    container.schedule_service.activate_slot(friday.slot_id)
    assert len(container.schedule_service.slots_for_group("g1")) == 3
    assert len(container.schedule_service.slots_for_day("friday")) == 1


def test_schedule_stats_counts_alternate_week_slots_as_half(container, make_slot):
    make_slot()  # 1.5h every week
    make_slot(day_of_week="tuesday", start_time="11:00", end_time="12:00", week_parity="odd")  # 0.5h/week
    inactive = make_slot(day_of_week="friday")
    container.schedule_service.deactivate_slot(inactive.slot_id)

    stats = container.schedule_service.schedule_stats()

    assert (stats.total, stats.active, stats.inactive) == (3, 2, 1)
    assert stats.by_day == {"monday": 1, "tuesday": 1, "friday": 1}
    assert stats.by_parity == {"all": 2, "odd": 1}
    assert stats.hours_per_week == 2.0


def test_import_reports_row_errors_and_keeps_going(container):
    rows = [
        {
            "subjectId": "math", "groupId": "g1", "teacherId": "t1",
            "dayOfWeek": "monday", "startTime": "09:00", "endTime": "10:30", "classroom": "101",
        },
        {
            "subjectId": "phys", "groupId": "g2", "teacherId": "t2",
            "dayOfWeek": "monday", "startTime": "10:00", "endTime": "11:00", "classroom": "101",
        },
        {
            "subjectId": "phys", "groupId": "g2", "teacherId": "t2",
            "dayOfWeek": "monday", "startTime": "bad", "endTime": "11:00",
        },
        {"subjectId": "phys", "groupId": "g2"},
        {
            "subjectId": "phys", "groupId": "g2", "teacherId": "t2",
            "dayOfWeek": "tuesday", "startTime": "10:00", "endTime": "11:00",
        },
    ]

    result = container.schedule_service.import_slots(rows)

    assert result.created == 2
    assert len(result.errors) == 3
    assert result.errors[0] == "Row 2: schedule conflict, time is already taken"
    assert result.errors[1].startswith("Row 3: ")
    assert result.errors[2].startswith("Row 4: ")
