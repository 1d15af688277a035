from __future__ import annotations

from typing import Optional, Sequence

from ..core.constants import USERS_COLLECTION
from ..core.enums import Role
from ..database.mapping import as_bool, optional, required
from ..database.store import Document, DocumentStore, Eq, OrderBy
from .model import User
from .repository import UserRepository


def user_from_document(doc: Document) -> User:
    return User(
        user_id=required(doc, "id", "User"),
        name=required(doc, "name", "User"),
        email=str(doc.get("email") or ""),
        role=required(doc, "role", "User", Role),
        is_active=as_bool(doc.get("isActive", True)),
        group_id=optional(doc, "groupId"),
        student_number=optional(doc, "studentId"),
    )


class StoreUserRepository(UserRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get_by_id(self, user_id: str) -> Optional[User]:
        doc = self._store.get(USERS_COLLECTION, user_id)
        return user_from_document(doc) if doc else None

    def list_all(self) -> Sequence[User]:
        docs = self._store.list(USERS_COLLECTION, order_by=[OrderBy("name")])
        return [user_from_document(d) for d in docs]

    def list_students_in_group(self, group_id: str) -> Sequence[User]:
        docs = self._store.list(
            USERS_COLLECTION,
            [Eq("role", Role.STUDENT.value), Eq("groupId", group_id)],
            [OrderBy("name")],
        )
        return [user_from_document(d) for d in docs]
