from __future__ import annotations

from datetime import date, datetime

import pytest

from class_attendance.attendance.model import AttendanceMark, AttendanceStats, MarkEntry
from class_attendance.attendance.service import AttendanceService
from class_attendance.core.enums import AttendanceStatus
from class_attendance.core.exceptions import NotFoundError, StoreUnavailable, ValidationError
from class_attendance.sessions.model import SessionOwner

MONDAY = date(2025, 9, 1)
NOW = datetime(2025, 9, 1, 9, 5, 0)


def _session(container):
    return container.session_service.sessions_for_date(SessionOwner(group_id="g1"), MONDAY)[0]


def _mark(status: AttendanceStatus, n: int) -> AttendanceMark:
    return AttendanceMark(
        mark_id=f"m{n}",
        session_id="c1",
        student_id=f"s{n}",
        status=status,
        marked_at=NOW,
        marked_by="t1",
    )


def test_rate_counts_late_as_attended_and_excused_in_total():
    statuses = (
        [AttendanceStatus.PRESENT] * 6
        + [AttendanceStatus.LATE] * 2
        + [AttendanceStatus.ABSENT, AttendanceStatus.EXCUSED]
    )
    stats = AttendanceStats.from_marks(_mark(s, i) for i, s in enumerate(statuses))

    assert (stats.total, stats.present, stats.late, stats.absent, stats.excused) == (10, 6, 2, 1, 1)
    assert stats.rate == pytest.approx(80.0)


def test_rate_is_zero_without_marks():
    assert AttendanceStats.from_marks([]).rate == 0


def test_marking_a_virtual_session_persists_it_first(container, make_slot):
    make_slot()
    virtual = _session(container)

    mark = container.attendance_service.mark(virtual, student_id="s1", status="present", marked_by="t1", now=NOW)

    stored = container.session_service.resolve(virtual.session_id)
    assert mark.session_id == stored.session_id
    assert not mark.session_id.startswith("v-")
    assert mark.marked_at == NOW


def test_bulk_mark_upserts_one_mark_per_student(container, make_slot):
    make_slot()
    service = container.attendance_service
    virtual = _session(container)

    service.bulk_mark(virtual, [{"studentId": "s1", "status": "present"}], marked_by="t1", now=NOW)
    result = service.bulk_mark(
        virtual,
        [MarkEntry(student_id="s1", status=AttendanceStatus.ABSENT, notes="left early")],
        marked_by="t1",
        now=NOW,
    )

    assert result.ok
    rows = service.attendance_for_session(virtual)
    assert len(rows) == 1
    assert rows[0].mark.status is AttendanceStatus.ABSENT
    assert rows[0].mark.notes == "left early"
    assert rows[0].student.name == "Oleg Petrov"


def test_bulk_mark_reports_each_failed_entry(container, make_slot):
    make_slot()

    result = container.attendance_service.bulk_mark(
        _session(container),
        [
            {"studentId": "s1", "status": "present"},
            {"studentId": "s2", "status": "sleeping"},
            {"studentId": "", "status": "late"},
        ],
        marked_by="t1",
        now=NOW,
    )

    assert not result.ok
    assert [m.student_id for m in result.marks] == ["s1"]
    assert [f.student_id for f in result.failures] == ["s2", ""]
    assert "status" in result.failures[0].reason


def test_malformed_entries_fail_alone_and_the_batch_continues(container, make_slot):
    make_slot()

    result = container.attendance_service.bulk_mark(
        _session(container),
        [
            {"studentId": "s1", "status": "present"},
            {"studentId": "s2", "status": "late", "notes": 5},
            "s3",
            {"studentId": "s3", "status": "absent"},
        ],
        marked_by="t1",
        now=NOW,
    )

    assert [m.student_id for m in result.marks] == ["s1", "s3"]
    assert [f.student_id for f in result.failures] == ["s2", ""]
    assert "notes" in result.failures[0].reason


class FlakyMarks:
    """Delegates to a real repository but fails writes for one student."""

    def __init__(self, inner, failing_student: str):
        self._inner = inner
        self._failing_student = failing_student

    def __getattr__(self, name):
        return getattr(self._inner, name)

    def create(self, *, fields):
        if fields["studentId"] == self._failing_student:
            raise StoreUnavailable("connection reset")
        return self._inner.create(fields=fields)


def test_store_failure_on_one_entry_does_not_stop_the_others(container, make_slot):
    make_slot()
    service = AttendanceService(
        FlakyMarks(container.attendance_repo, "s2"),
        container.session_service,
        container.users_repo,
        container.sessions_repo,
    )

    result = service.bulk_mark(
        _session(container),
        [{"studentId": s, "status": "present"} for s in ("s1", "s2", "s3")],
        marked_by="t1",
        now=NOW,
    )

    assert [m.student_id for m in result.marks] == ["s1", "s3"]
    assert len(result.failures) == 1
    assert result.failures[0].student_id == "s2"
    assert result.failures[0].reason == "connection reset"


def test_marking_a_canceled_session_is_rejected(container, make_slot):
    make_slot()
    canceled = container.session_service.cancel(_session(container))

    with pytest.raises(ValidationError):
        container.attendance_service.mark(canceled, student_id="s1", status="present", marked_by="t1")


def test_mark_requires_marker(container, make_slot):
    make_slot()
    with pytest.raises(ValidationError):
        container.attendance_service.mark(_session(container), student_id="s1", status="present", marked_by="")


def test_delete_mark(container, make_slot):
    make_slot()
    service = container.attendance_service
    mark = service.mark(_session(container), student_id="s1", status="late", marked_by="t1", now=NOW)

    service.delete_mark(mark.mark_id)
    assert service.attendance_for_session(mark.session_id) == []
    with pytest.raises(NotFoundError):
        service.delete_mark(mark.mark_id)
