from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..common.time_utils import format_iso_date, format_time, parse_iso_date
from ..core.constants import SESSIONS_COLLECTION
from ..database.mapping import as_bool, optional, required
from ..database.store import Document, DocumentStore, Eq, Gte, Lte, OrderBy
from .model import PersistedSession
from .repository import SessionRepository


def session_from_document(doc: Document) -> PersistedSession:
    return PersistedSession(
        session_id=required(doc, "id", "Session"),
        recurring_slot_id=optional(doc, "recurringSlotId"),
        subject_id=required(doc, "subjectId", "Session"),
        group_id=required(doc, "groupId", "Session"),
        teacher_id=required(doc, "teacherId", "Session"),
        session_date=required(doc, "date", "Session", parse_iso_date),
        start_time=required(doc, "startTime", "Session", format_time),
        end_time=required(doc, "endTime", "Session", format_time),
        classroom=str(doc.get("classroom") or ""),
        topic=optional(doc, "topic"),
        notes=optional(doc, "notes"),
        completed=as_bool(doc.get("completed", False)),
        canceled=as_bool(doc.get("canceled", False)),
        virtual_id=optional(doc, "virtualId"),
    )


class StoreSessionRepository(SessionRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get_by_id(self, session_id: str) -> Optional[PersistedSession]:
        doc = self._store.get(SESSIONS_COLLECTION, session_id)
        return session_from_document(doc) if doc else None

    def find_by_slot_and_date(self, *, slot_id: str, session_date: date) -> Optional[PersistedSession]:
        docs = self._store.list(
            SESSIONS_COLLECTION,
            [Eq("recurringSlotId", slot_id), Eq("date", format_iso_date(session_date))],
            [OrderBy("createdAt")],
        )
        return session_from_document(docs[0]) if docs else None

    def find_by_virtual_id(self, virtual_id: str) -> Optional[PersistedSession]:
        docs = self._store.list(SESSIONS_COLLECTION, [Eq("virtualId", virtual_id)], [OrderBy("createdAt")])
        return session_from_document(docs[0]) if docs else None

    def list_sessions(
        self,
        *,
        session_date: Optional[date] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        teacher_id: Optional[str] = None,
        group_id: Optional[str] = None,
        subject_id: Optional[str] = None,
        slot_id: Optional[str] = None,
    ) -> Sequence[PersistedSession]:
        filters = []
        if session_date is not None:
            filters.append(Eq("date", format_iso_date(session_date)))
        if date_from is not None:
            filters.append(Gte("date", format_iso_date(date_from)))
        if date_to is not None:
            filters.append(Lte("date", format_iso_date(date_to)))
        if teacher_id:
            filters.append(Eq("teacherId", teacher_id))
        if group_id:
            filters.append(Eq("groupId", group_id))
        if subject_id:
            filters.append(Eq("subjectId", subject_id))
        if slot_id:
            filters.append(Eq("recurringSlotId", slot_id))

        docs = self._store.list(SESSIONS_COLLECTION, filters, [OrderBy("date"), OrderBy("startTime")])
        sessions = [session_from_document(d) for d in docs]
        # Stored times may be unpadded; order on the normalized values.
        sessions.sort(key=lambda s: (s.session_date, s.start_time))
        return sessions

    def create(self, *, fields: dict) -> PersistedSession:
        return session_from_document(self._store.create(SESSIONS_COLLECTION, fields))

    def update(self, *, session_id: str, fields: dict) -> PersistedSession:
        return session_from_document(self._store.update(SESSIONS_COLLECTION, session_id, fields))
