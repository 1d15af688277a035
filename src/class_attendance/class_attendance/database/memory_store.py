from __future__ import annotations

import copy
import threading
import uuid
from typing import Dict, List, Optional, Sequence

from ..common.time_utils import now_local
from ..core.exceptions import NotFoundError, ValidationError
from .store import Document, DocumentStore, Filter, OrderBy, sort_documents


class InMemoryDocumentStore(DocumentStore):
    """Process-local document store for tests and local development."""

    def __init__(self, seed: Optional[Dict[str, List[Document]]] = None):
        self._data: Dict[str, Dict[str, Document]] = {}
        self._lock = threading.Lock()
        for collection, docs in (seed or {}).items():
            for doc in docs:
                fields = {k: v for k, v in doc.items() if k != "id"}
                self.create(collection, fields, doc_id=doc.get("id"))

    def list(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Sequence[OrderBy] = (),
    ) -> List[Document]:
        with self._lock:
            docs = [
                copy.deepcopy(d)
                for d in self._data.get(collection, {}).values()
                if all(f.matches(d) for f in filters)
            ]
        return sort_documents(docs, order_by)

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._lock:
            doc = self._data.get(collection, {}).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    def create(self, collection: str, fields: Document, *, doc_id: Optional[str] = None) -> Document:
        doc_id = doc_id or str(uuid.uuid4())
        stamp = now_local().isoformat(timespec="seconds")
        with self._lock:
            bucket = self._data.setdefault(collection, {})
            if doc_id in bucket:
                raise ValidationError(f"Document already exists: {collection}/{doc_id}", field="id")
            doc = {**copy.deepcopy(fields), "id": doc_id, "createdAt": stamp, "updatedAt": stamp}
            bucket[doc_id] = doc
            return copy.deepcopy(doc)

    def update(self, collection: str, doc_id: str, fields: Document) -> Document:
        with self._lock:
            doc = self._data.get(collection, {}).get(doc_id)
            if doc is None:
                raise NotFoundError(collection, doc_id)
            changes = {k: v for k, v in copy.deepcopy(fields).items() if k != "id"}
            doc.update(changes)
            doc["updatedAt"] = now_local().isoformat(timespec="seconds")
            return copy.deepcopy(doc)

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._lock:
            return self._data.get(collection, {}).pop(doc_id, None) is not None
