from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..common.time_utils import format_iso_date
from ..core.constants import ATTENDANCE_COLLECTION
from ..core.enums import AttendanceStatus
from ..database.mapping import optional, required
from ..database.store import Document, DocumentStore, Eq, Gte, Lte, OrderBy
from .model import AttendanceMark
from .repository import AttendanceRepository


def mark_from_document(doc: Document) -> AttendanceMark:
    return AttendanceMark(
        mark_id=required(doc, "id", "AttendanceMark"),
        session_id=required(doc, "sessionId", "AttendanceMark"),
        student_id=required(doc, "studentId", "AttendanceMark"),
        status=required(doc, "status", "AttendanceMark", AttendanceStatus),
        marked_at=required(doc, "markedAt", "AttendanceMark", datetime.fromisoformat),
        marked_by=required(doc, "markedBy", "AttendanceMark"),
        notes=optional(doc, "notes"),
    )


class StoreAttendanceRepository(AttendanceRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get_by_id(self, mark_id: str) -> Optional[AttendanceMark]:
        doc = self._store.get(ATTENDANCE_COLLECTION, mark_id)
        return mark_from_document(doc) if doc else None

    def find(self, *, session_id: str, student_id: str) -> Optional[AttendanceMark]:
        docs = self._store.list(
            ATTENDANCE_COLLECTION,
            [Eq("sessionId", session_id), Eq("studentId", student_id)],
            [OrderBy("createdAt")],
        )
        return mark_from_document(docs[0]) if docs else None

    def list_for_session(self, session_id: str) -> Sequence[AttendanceMark]:
        docs = self._store.list(ATTENDANCE_COLLECTION, [Eq("sessionId", session_id)], [OrderBy("markedAt")])
        return [mark_from_document(d) for d in docs]

    def list_for_student(
        self,
        student_id: str,
        *,
        marked_from: Optional[date] = None,
        marked_to: Optional[date] = None,
    ) -> Sequence[AttendanceMark]:
        filters = [Eq("studentId", student_id)]
        if marked_from is not None:
            filters.append(Gte("markedAt", format_iso_date(marked_from)))
        if marked_to is not None:
            filters.append(Lte("markedAt", f"{format_iso_date(marked_to)}T23:59:59"))
        docs = self._store.list(ATTENDANCE_COLLECTION, filters, [OrderBy("markedAt", descending=True)])
        return [mark_from_document(d) for d in docs]

    def create(self, *, fields: dict) -> AttendanceMark:
        return mark_from_document(self._store.create(ATTENDANCE_COLLECTION, fields))

    def update(self, *, mark_id: str, fields: dict) -> AttendanceMark:
        return mark_from_document(self._store.update(ATTENDANCE_COLLECTION, mark_id, fields))

    def delete(self, *, mark_id: str) -> bool:
        return self._store.delete(ATTENDANCE_COLLECTION, mark_id)
