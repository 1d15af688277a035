from __future__ import annotations

import pytest

from class_attendance.core.enums import WeekDay, WeekParity
from class_attendance.core.exceptions import ConflictError
from class_attendance.schedules.model import SlotCandidate


def _candidate(**overrides):
    kwargs = dict(
        day_of_week=WeekDay.MONDAY,
        start_time="10:00",
        end_time="11:00",
        group_id="g2",
        teacher_id="t2",
        classroom="202",
    )
    kwargs.update(overrides)
    return SlotCandidate(**kwargs)


def test_shared_classroom_alone_is_a_conflict(container, make_slot):
    slot = make_slot(classroom="101")

    result = container.conflict_detector.check_conflict(_candidate(classroom="101"))

    assert result.has_conflict is True
    assert [s.slot_id for s in result.conflicts] == [slot.slot_id]


def test_shared_teacher_or_group_is_a_conflict(container, make_slot):
    make_slot()

    assert container.conflict_detector.check_conflict(_candidate(teacher_id="t1")).has_conflict
    assert container.conflict_detector.check_conflict(_candidate(group_id="g1")).has_conflict


def test_back_to_back_slots_do_not_conflict(container, make_slot):
    make_slot(start_time="09:00", end_time="10:30")

    result = container.conflict_detector.check_conflict(
        _candidate(start_time="10:30", end_time="12:00", group_id="g1", teacher_id="t1", classroom="101")
    )
    assert result.has_conflict is False
    assert result.conflicts == ()


def test_other_weekday_or_no_shared_resource_is_not_a_conflict(container, make_slot):
    make_slot()

    assert not container.conflict_detector.check_conflict(
        _candidate(day_of_week=WeekDay.TUESDAY, group_id="g1")
    ).has_conflict
    assert not container.conflict_detector.check_conflict(_candidate()).has_conflict


def test_empty_classrooms_never_collide(container, make_slot):
    make_slot(classroom="")

    assert not container.conflict_detector.check_conflict(_candidate(classroom="")).has_conflict
    assert not container.conflict_detector.check_conflict(_candidate(classroom=None)).has_conflict


def test_parity_does_not_narrow_conflicts(container, make_slot):
    make_slot(week_parity="odd")

    result = container.conflict_detector.check_conflict(_candidate(group_id="g1", week_parity=WeekParity.EVEN))
    assert result.has_conflict is True


def test_inactive_slots_are_ignored(container, make_slot):
    slot = make_slot()
    container.schedule_service.deactivate_slot(slot.slot_id)

    assert not container.conflict_detector.check_conflict(_candidate(group_id="g1")).has_conflict


def test_exclude_id_skips_the_slot_being_edited(container, make_slot):
    slot = make_slot()
    same = _candidate(start_time="09:00", end_time="10:30", group_id="g1", teacher_id="t1", classroom="101")

    assert container.conflict_detector.check_conflict(same).has_conflict
    assert not container.conflict_detector.check_conflict(same, exclude_id=slot.slot_id).has_conflict


def test_conflicts_are_warnings_unless_blocking(container, make_slot):
    make_slot()
    service = container.schedule_service

    result = service.create_slot(
        subject_id="phys",
        group_id="g2",
        teacher_id="t1",
        day_of_week="monday",
        start_time="10:00",
        end_time="11:00",
    )
    assert result.has_conflict is True
    assert len(service.list_slots()) == 2

    with pytest.raises(ConflictError) as exc:
        service.create_slot(
            subject_id="phys",
            group_id="g2",
            teacher_id="t1",
            day_of_week="monday",
            start_time="10:00",
            end_time="11:00",
            block_on_conflict=True,
        )
    assert len(exc.value.conflicts) == 2
    assert len(service.list_slots()) == 2


def test_check_conflict_accepts_wire_values(container, make_slot):
    make_slot()

    result = container.schedule_service.check_conflict(
        day_of_week="Monday",
        start_time="9:30",
        end_time="10:00",
        classroom="101",
    )
    assert result.has_conflict is True
