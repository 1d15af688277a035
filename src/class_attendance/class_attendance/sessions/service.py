from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Sequence, Union

from ..catalog.repository import CatalogRepository
from ..common.time_utils import format_iso_date
from ..common.validators import optional_text, require_id, require_time_range
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..schedules.conflicts import ConflictDetector, candidate_for_session
from ..schedules.model import ConflictResult
from ..schedules.repository import RecurringSlotRepository
from ..users.repository import UserRepository
from .materializer import SessionMaterializer, is_virtual_id, slot_runs_on, virtual_from_slot
from .model import PersistedSession, Session, SessionDetails, SessionOwner, VirtualSession
from .repository import SessionRepository

logger = logging.getLogger(__name__)

SessionRef = Union[Session, str]


def _session_fields(session: Session) -> dict:
    return {
        "recurringSlotId": session.recurring_slot_id,
        "subjectId": session.subject_id,
        "groupId": session.group_id,
        "teacherId": session.teacher_id,
        "date": format_iso_date(session.session_date),
        "startTime": session.start_time,
        "endTime": session.end_time,
        "classroom": session.classroom,
        "topic": session.topic,
        "notes": session.notes,
        "completed": session.completed,
        "canceled": session.canceled,
    }


class SessionService:
    """Session lifecycle: virtual -> persisted (first write) -> completed | canceled."""

    def __init__(
        self,
        sessions: SessionRepository,
        slots: RecurringSlotRepository,
        materializer: SessionMaterializer,
        detector: ConflictDetector,
        *,
        users: Optional[UserRepository] = None,
        catalog: Optional[CatalogRepository] = None,
    ):
        self._sessions = sessions
        self._slots = slots
        self._materializer = materializer
        self._detector = detector
        self._users = users
        self._catalog = catalog

    def sessions_for_date(self, owner: SessionOwner, session_date: date) -> List[Session]:
        return self._materializer.sessions_for_date(owner, session_date)

    def virtual_for(self, *, slot_id: str, session_date: date) -> VirtualSession:
        """Rebuild the virtual session of a slot on a date (for writes addressed by slot + date)."""
        slot = self._slots.get_by_id(require_id(slot_id, "recurringSlotId"))
        if not slot:
            raise NotFoundError("RecurringSlot", slot_id)
        if not slot_runs_on(slot, session_date):
            raise ValidationError(
                f"Slot {slot_id} does not run on {format_iso_date(session_date)}",
                field="date",
            )
        return virtual_from_slot(slot, session_date)

    def find_persisted(self, session_id: str) -> Optional[PersistedSession]:
        """Stored record for a persisted id, or the stored counterpart of a virtual id."""
        if is_virtual_id(session_id):
            return self._sessions.find_by_virtual_id(session_id)
        return self._sessions.get_by_id(session_id)

    def resolve(self, session_id: str) -> PersistedSession:
        session = self.find_persisted(require_id(session_id, "sessionId"))
        if not session:
            raise NotFoundError("Session", session_id)
        return session

    def ensure_persisted(self, session: SessionRef) -> PersistedSession:
        if isinstance(session, str):
            return self.resolve(session)
        if isinstance(session, PersistedSession):
            return session

        existing = self._sessions.find_by_virtual_id(session.session_id)
        if existing is None and session.recurring_slot_id:
            existing = self._sessions.find_by_slot_and_date(
                slot_id=session.recurring_slot_id,
                session_date=session.session_date,
            )
        if existing:
            return existing

        fields = _session_fields(session)
        fields["virtualId"] = session.session_id
        created = self._sessions.create(fields=fields)
        logger.info(
            "Materialized session %s from slot %s on %s",
            created.session_id,
            session.recurring_slot_id,
            format_iso_date(session.session_date),
        )
        return created

    def complete(self, session: SessionRef) -> PersistedSession:
        target = self.ensure_persisted(session)
        if target.canceled:
            raise ValidationError("A canceled session cannot be completed", field="completed")
        if target.completed:
            return target
        return self._sessions.update(session_id=target.session_id, fields={"completed": True})

    def cancel(self, session: SessionRef, *, notes: Optional[str] = None) -> PersistedSession:
        target = self.ensure_persisted(session)
        if target.completed:
            raise ValidationError("A completed session cannot be canceled", field="canceled")
        notes = optional_text(notes, "notes")
        if target.canceled and notes is None:
            return target

        fields: dict = {"canceled": True}
        if notes is not None:
            fields["notes"] = notes
        updated = self._sessions.update(session_id=target.session_id, fields=fields)
        logger.info("Session %s canceled", updated.session_id)
        return updated

    def update_details(
        self,
        session: SessionRef,
        *,
        topic: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> PersistedSession:
        target = self.ensure_persisted(session)
        fields = {}
        if topic is not None:
            fields["topic"] = optional_text(topic, "topic")
        if notes is not None:
            fields["notes"] = optional_text(notes, "notes")
        if not fields:
            return target
        return self._sessions.update(session_id=target.session_id, fields=fields)

    def create_adhoc_session(
        self,
        *,
        subject_id: str,
        group_id: str,
        teacher_id: str,
        session_date: date,
        start_time: str,
        end_time: str,
        classroom: str = "",
        topic: Optional[str] = None,
        block_on_conflict: bool = False,
    ) -> tuple[PersistedSession, ConflictResult]:
        """Create a one-off session not backed by a recurring slot."""
        subject_id = require_id(subject_id, "subjectId")
        group_id = require_id(group_id, "groupId")
        teacher_id = require_id(teacher_id, "teacherId")
        start_time, end_time = require_time_range(start_time, end_time)
        classroom = optional_text(classroom, "classroom") or ""
        topic = optional_text(topic, "topic")

        candidate = candidate_for_session(
            session_date=session_date,
            start_time=start_time,
            end_time=end_time,
            group_id=group_id,
            teacher_id=teacher_id,
            classroom=classroom,
        )
        result = self._detector.check_conflict(candidate)
        if result.has_conflict and block_on_conflict:
            raise ConflictError(result.conflicts)

        created = self._sessions.create(
            fields={
                "recurringSlotId": None,
                "subjectId": subject_id,
                "groupId": group_id,
                "teacherId": teacher_id,
                "date": format_iso_date(session_date),
                "startTime": start_time,
                "endTime": end_time,
                "classroom": classroom,
                "topic": topic,
                "notes": None,
                "completed": False,
                "canceled": False,
            }
        )
        logger.info("Ad-hoc session %s created on %s", created.session_id, format_iso_date(session_date))
        return created, result

    def persist_period(self, owner: SessionOwner, start: date, end: date) -> List[PersistedSession]:
        """Store every virtual session in [start, end]; dates already stored are left alone."""
        created: List[PersistedSession] = []
        for sessions in self._materializer.sessions_for_range(owner, start, end).values():
            for session in sessions:
                if isinstance(session, VirtualSession):
                    created.append(self.ensure_persisted(session))
        logger.info(
            "Persisted %d session(s) for %s between %s and %s",
            len(created),
            owner,
            format_iso_date(start),
            format_iso_date(end),
        )
        return created

    def history(
        self,
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        teacher_id: Optional[str] = None,
        group_id: Optional[str] = None,
        subject_id: Optional[str] = None,
    ) -> Sequence[PersistedSession]:
        if date_from and date_to and date_to < date_from:
            raise ValidationError("End date must not be before start date", field="dateTo")
        return self._sessions.list_sessions(
            date_from=date_from,
            date_to=date_to,
            teacher_id=teacher_id,
            group_id=group_id,
            subject_id=subject_id,
        )

    def with_details(self, sessions: Sequence[Session]) -> List[SessionDetails]:
        # Joins are done in memory: one listing per referenced collection.
        subjects = {s.subject_id: s for s in self._catalog.list_subjects()} if self._catalog else {}
        groups = {g.group_id: g for g in self._catalog.list_groups()} if self._catalog else {}
        users = {u.user_id: u for u in self._users.list_all()} if self._users else {}
        return [
            SessionDetails(
                session=s,
                subject=subjects.get(s.subject_id),
                group=groups.get(s.group_id),
                teacher=users.get(s.teacher_id),
            )
            for s in sessions
        ]
