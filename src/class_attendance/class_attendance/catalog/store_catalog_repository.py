from __future__ import annotations

from typing import Optional, Sequence

from ..core.constants import GROUPS_COLLECTION, SUBJECTS_COLLECTION
from ..database.mapping import as_bool, optional, required
from ..database.store import Document, DocumentStore, OrderBy
from .model import Group, Subject
from .repository import CatalogRepository


def group_from_document(doc: Document) -> Group:
    return Group(
        group_id=required(doc, "id", "Group"),
        name=required(doc, "name", "Group"),
        code=str(doc.get("code") or ""),
        course=int(doc.get("course") or 1),
        specialization=str(doc.get("specialization") or ""),
        is_active=as_bool(doc.get("isActive", True)),
    )


def subject_from_document(doc: Document) -> Subject:
    return Subject(
        subject_id=required(doc, "id", "Subject"),
        name=required(doc, "name", "Subject"),
        code=str(doc.get("code") or ""),
        teacher_id=optional(doc, "teacherId"),
        group_ids=tuple(str(g) for g in doc.get("groupIds") or ()),
        hours_total=int(doc.get("hoursTotal") or 0),
        is_active=as_bool(doc.get("isActive", True)),
    )


class StoreCatalogRepository(CatalogRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get_group(self, group_id: str) -> Optional[Group]:
        doc = self._store.get(GROUPS_COLLECTION, group_id)
        return group_from_document(doc) if doc else None

    def list_groups(self) -> Sequence[Group]:
        return [group_from_document(d) for d in self._store.list(GROUPS_COLLECTION, order_by=[OrderBy("name")])]

    def get_subject(self, subject_id: str) -> Optional[Subject]:
        doc = self._store.get(SUBJECTS_COLLECTION, subject_id)
        return subject_from_document(doc) if doc else None

    def list_subjects(self) -> Sequence[Subject]:
        return [subject_from_document(d) for d in self._store.list(SUBJECTS_COLLECTION, order_by=[OrderBy("name")])]
