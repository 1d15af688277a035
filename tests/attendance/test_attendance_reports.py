from __future__ import annotations

from datetime import date, datetime

import pytest

from class_attendance.core.constants import UNKNOWN_STUDENT_NAME
from class_attendance.core.enums import AttendanceStatus
from class_attendance.core.exceptions import NotFoundError, ValidationError
from class_attendance.sessions.model import SessionOwner


def _session(container, day=date(2025, 9, 1)):
    return container.session_service.sessions_for_date(SessionOwner(group_id="g1"), day)[0]


def test_unwritten_virtual_session_has_no_marks(container, make_slot):
    make_slot()
    virtual = _session(container)

    assert container.attendance_service.attendance_for_session(virtual) == []
    assert container.attendance_service.attendance_for_session(virtual.session_id) == []
    assert container.attendance_service.stats_for_session(virtual).total == 0
    assert container.sessions_repo.list_sessions() == []


def test_unknown_persisted_session_raises(container):
    with pytest.raises(NotFoundError):
        container.attendance_service.attendance_for_session("missing")


def test_marks_for_unknown_users_get_a_placeholder(container, make_slot):
    make_slot()
    mark = container.attendance_service.mark(_session(container), student_id="ghost", status="present", marked_by="t1")

    rows = container.attendance_service.attendance_for_session(mark.session_id)
    assert rows[0].student.user_id == "ghost"
    assert rows[0].student.name == UNKNOWN_STUDENT_NAME


def test_roster_lists_group_and_marked_outsiders(container, make_slot):
    make_slot()
    service = container.attendance_service
    session = _session(container)
    service.bulk_mark(
        session,
        [{"studentId": "s1", "status": "present"}, {"studentId": "s3", "status": "late"}],
        marked_by="t1",
    )

    rows = service.roster_for_session(session.session_id)

    by_id = {r.student.user_id: r for r in rows}
    assert set(by_id) == {"s1", "s2", "s3"}
    assert by_id["s1"].mark.status is AttendanceStatus.PRESENT
    assert by_id["s2"].mark is None
    assert by_id["s3"].in_group is False
    assert by_id["s1"].in_group is True


def test_roster_for_unwritten_virtual_session_lists_the_group(container, make_slot):
    make_slot()
    rows = container.attendance_service.roster_for_session(_session(container))

    assert [r.student.user_id for r in rows] == ["s2", "s1"]  # ordered by name
    assert all(r.mark is None for r in rows)


def test_student_marks_filter_by_marked_date_and_status(container, make_slot):
    make_slot()
    service = container.attendance_service
    service.mark(
        _session(container, date(2025, 9, 1)), student_id="s1", status="present", marked_by="t1",
        now=datetime(2025, 9, 1, 9, 5),
    )
    service.mark(
        _session(container, date(2025, 9, 8)), student_id="s1", status="absent", marked_by="t1",
        now=datetime(2025, 9, 8, 9, 5),
    )

    everything = service.student_marks("s1")
    assert [m.status for m in everything] == [AttendanceStatus.ABSENT, AttendanceStatus.PRESENT]

    assert len(service.student_marks("s1", date_from=date(2025, 9, 2))) == 1
    assert len(service.student_marks("s1", date_to=date(2025, 9, 1))) == 1
    assert len(service.student_marks("s1", statuses=["present", "late"])) == 1

    with pytest.raises(ValidationError):
        service.student_marks("s1", date_from=date(2025, 9, 8), date_to=date(2025, 9, 1))


def test_student_stats_can_be_narrowed_to_a_subject(container, make_slot):
    make_slot()
    make_slot(subject_id="phys", teacher_id="t2", day_of_week="tuesday")
    service = container.attendance_service
    service.mark(_session(container, date(2025, 9, 1)), student_id="s1", status="present", marked_by="t1")
    service.mark(_session(container, date(2025, 9, 2)), student_id="s1", status="absent", marked_by="t2")

    overall = service.stats_for_student("s1")
    assert (overall.total, overall.rate) == (2, 50.0)

    physics = service.stats_for_student("s1", subject_id="phys")
    assert (physics.total, physics.absent, physics.rate) == (1, 1, 0)
