from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, List, Mapping, Optional, Sequence, Union

from ..common.time_utils import now_local
from ..common.validators import optional_text, require_enum, require_id
from ..core.constants import UNKNOWN_STUDENT_NAME
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import DomainError, NotFoundError, StoreUnavailable, ValidationError
from ..sessions.materializer import is_virtual_id
from ..sessions.model import PersistedSession, Session
from ..sessions.repository import SessionRepository
from ..sessions.service import SessionRef, SessionService
from ..users.model import User
from ..users.repository import UserRepository
from .model import (
    AttendanceMark,
    AttendanceStats,
    BulkMarkFailure,
    BulkMarkResult,
    MarkEntry,
    MarkWithStudent,
    RosterRow,
)
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def unknown_student(student_id: str) -> User:
    return User(user_id=student_id, name=UNKNOWN_STUDENT_NAME, email="", role=Role.STUDENT)


class AttendanceService:
    def __init__(
        self,
        marks: AttendanceRepository,
        sessions: SessionService,
        users: UserRepository,
        session_records: SessionRepository,
    ):
        self._marks = marks
        self._sessions = sessions
        self._users = users
        self._session_records = session_records

    # -- writes ---------------------------------------------------------------

    def _upsert(
        self,
        session: PersistedSession,
        *,
        student_id: str,
        status,
        marked_by: str,
        notes: Optional[str],
        now: datetime,
    ) -> AttendanceMark:
        student_id = require_id(student_id, "studentId")
        status = require_enum(AttendanceStatus, status, "status")
        fields = {
            "sessionId": session.session_id,
            "studentId": student_id,
            "status": status.value,
            "notes": optional_text(notes, "notes"),
            "markedAt": now.isoformat(timespec="seconds"),
            "markedBy": marked_by,
        }

        existing = self._marks.find(session_id=session.session_id, student_id=student_id)
        if existing:
            return self._marks.update(mark_id=existing.mark_id, fields=fields)
        return self._marks.create(fields=fields)

    def _writable_session(self, session: SessionRef) -> PersistedSession:
        target = self._sessions.ensure_persisted(session)
        if target.canceled:
            raise ValidationError("Cannot mark attendance for a canceled session", field="sessionId")
        return target

    def mark(
        self,
        session: SessionRef,
        *,
        student_id: str,
        status,
        marked_by: str,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceMark:
        marked_by = require_id(marked_by, "markedBy")
        target = self._writable_session(session)
        mark = self._upsert(
            target,
            student_id=student_id,
            status=status,
            marked_by=marked_by,
            notes=notes,
            now=now or now_local(),
        )
        logger.info("Marked %s as %s in session %s", mark.student_id, mark.status.value, target.session_id)
        return mark

    def bulk_mark(
        self,
        session: SessionRef,
        entries: Iterable[Union[MarkEntry, Mapping]],
        *,
        marked_by: str,
        now: Optional[datetime] = None,
    ) -> BulkMarkResult:
        """Upsert one mark per entry; each entry succeeds or fails on its own.

        Not atomic: on failure some marks are written and others are not, and
        every failed entry is reported with its reason.
        """
        marked_by = require_id(marked_by, "markedBy")
        target = self._writable_session(session)
        now = now or now_local()

        marks: List[AttendanceMark] = []
        failures: List[BulkMarkFailure] = []
        for raw in entries:
            student_id = ""
            try:
                entry = raw if isinstance(raw, MarkEntry) else MarkEntry.from_payload(raw)
                student_id = str(entry.student_id or "")
                marks.append(
                    self._upsert(
                        target,
                        student_id=entry.student_id,
                        status=entry.status,
                        marked_by=marked_by,
                        notes=entry.notes,
                        now=now,
                    )
                )
            except (DomainError, StoreUnavailable) as e:
                logger.warning("Bulk mark failed for student %r in session %s: %s", student_id, target.session_id, e)
                failures.append(BulkMarkFailure(student_id=student_id, reason=str(e)))

        logger.info(
            "Bulk mark for session %s: %d written, %d failed",
            target.session_id,
            len(marks),
            len(failures),
        )
        return BulkMarkResult(marks=marks, failures=failures)

    def delete_mark(self, mark_id: str) -> None:
        """Explicit administrative removal; marks are never removed implicitly."""
        mark_id = require_id(mark_id, "markId")
        if not self._marks.get_by_id(mark_id):
            raise NotFoundError("AttendanceMark", mark_id)
        self._marks.delete(mark_id=mark_id)
        logger.info("Attendance mark %s deleted", mark_id)

    # -- reads ----------------------------------------------------------------

    def _stored_counterpart(self, session: SessionRef) -> Optional[PersistedSession]:
        if isinstance(session, PersistedSession):
            return session
        session_id = session if isinstance(session, str) else session.session_id
        found = self._sessions.find_persisted(session_id)
        if found is None and not is_virtual_id(session_id):
            raise NotFoundError("Session", session_id)
        return found

    def _marks_for(self, session: SessionRef) -> Sequence[AttendanceMark]:
        # A virtual session nobody has written to yet has no marks.
        stored = self._stored_counterpart(session)
        return self._marks.list_for_session(stored.session_id) if stored else []

    def attendance_for_session(self, session: SessionRef) -> List[MarkWithStudent]:
        marks = self._marks_for(session)
        if not marks:
            return []
        users = {u.user_id: u for u in self._users.list_all()}
        return [MarkWithStudent(mark=m, student=users.get(m.student_id) or unknown_student(m.student_id)) for m in marks]

    def roster_for_session(self, session: Union[Session, str]) -> List[RosterRow]:
        if isinstance(session, str):
            resolved: Session = self._sessions.resolve(session)
        else:
            resolved = session

        marks = {m.student_id: m for m in self._marks_for(resolved)}
        students = self._users.list_students_in_group(resolved.group_id)

        rows = [RosterRow(student=s, mark=marks.pop(s.user_id, None)) for s in students]
        if marks:
            users = {u.user_id: u for u in self._users.list_all()}
            for student_id, mark in marks.items():
                rows.append(
                    RosterRow(student=users.get(student_id) or unknown_student(student_id), mark=mark, in_group=False)
                )
        return rows

    def stats_for_session(self, session: SessionRef) -> AttendanceStats:
        return AttendanceStats.from_marks(self._marks_for(session))

    def student_marks(
        self,
        student_id: str,
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        statuses: Optional[Iterable] = None,
    ) -> List[AttendanceMark]:
        student_id = require_id(student_id, "studentId")
        if date_from and date_to and date_to < date_from:
            raise ValidationError("End date must not be before start date", field="dateTo")

        marks = list(self._marks.list_for_student(student_id, marked_from=date_from, marked_to=date_to))
        if statuses:
            wanted = {require_enum(AttendanceStatus, s, "status") for s in statuses}
            marks = [m for m in marks if m.status in wanted]
        return marks

    def stats_for_student(
        self,
        student_id: str,
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        subject_id: Optional[str] = None,
    ) -> AttendanceStats:
        marks = self.student_marks(student_id, date_from=date_from, date_to=date_to)
        if subject_id:
            session_ids = {s.session_id for s in self._session_records.list_sessions(subject_id=subject_id)}
            marks = [m for m in marks if m.session_id in session_ids]
        return AttendanceStats.from_marks(marks)

    def student_profile(self, student_id: str) -> User:
        student = self._users.get_by_id(require_id(student_id, "studentId"))
        return student or unknown_student(student_id)
