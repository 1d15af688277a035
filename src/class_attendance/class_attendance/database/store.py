"""Document store collaborator.

The core only needs get/list/create/update/delete by id plus equality and
range filters combined with AND. Joins across collections are done by callers
in memory.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union

Document = Dict[str, Any]


@dataclass(frozen=True)
class Eq:
    field: str
    value: Any

    def matches(self, doc: Document) -> bool:
        return doc.get(self.field) == self.value


@dataclass(frozen=True)
class Gte:
    field: str
    value: Any

    def matches(self, doc: Document) -> bool:
        current = doc.get(self.field)
        return current is not None and current >= self.value


@dataclass(frozen=True)
class Lte:
    field: str
    value: Any

    def matches(self, doc: Document) -> bool:
        current = doc.get(self.field)
        return current is not None and current <= self.value


Filter = Union[Eq, Gte, Lte]


@dataclass(frozen=True)
class OrderBy:
    field: str
    descending: bool = False


class DocumentStore(Protocol):
    def list(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Sequence[OrderBy] = (),
    ) -> List[Document]:
        raise NotImplementedError

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        """Return the document or None when the id is absent."""

        raise NotImplementedError

    def create(self, collection: str, fields: Document, *, doc_id: Optional[str] = None) -> Document:
        """Create a document; the store assigns an id when doc_id is None."""

        raise NotImplementedError

    def update(self, collection: str, doc_id: str, fields: Document) -> Document:
        """Merge fields into an existing document.

        Raises NotFoundError when the id is absent.
        """

        raise NotImplementedError

    def delete(self, collection: str, doc_id: str) -> bool:
        raise NotImplementedError


def sort_documents(docs: List[Document], order_by: Sequence[OrderBy]) -> List[Document]:
    # Stable sorts applied last-key-first give a multi-key ordering.
    for order in reversed(list(order_by)):
        docs.sort(
            key=lambda d, f=order.field: (d.get(f) is None, d.get(f) if d.get(f) is not None else ""),
            reverse=order.descending,
        )
    return docs
