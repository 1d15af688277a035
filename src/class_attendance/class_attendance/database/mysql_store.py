from __future__ import annotations

import json
import re
import uuid
from typing import List, Optional, Sequence

import mysql.connector

from ..common.time_utils import now_local
from ..core.exceptions import NotFoundError, ValidationError
from .connection import DatabaseConnection
from .mysql_base import db_cursor, fetchall, fetchone
from .store import Document, DocumentStore, Eq, Filter, Gte, Lte, OrderBy

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _json_path(field: str) -> str:
    if not _FIELD_RE.match(field):
        raise ValidationError(f"Unsupported field name: {field!r}", field=field)
    return f"$.{field}"


class MySQLDocumentStore(DocumentStore):
    """Documents kept as JSON rows in a single `documents` table.

    Equality compares JSON values; range filters and ordering compare the
    unquoted text, which is correct for ISO dates, timestamps and HH:MM times.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Sequence[OrderBy] = (),
    ) -> List[Document]:
        clauses = ["collection=%s"]
        params: list[object] = [collection]
        for f in filters:
            path = _json_path(f.field)
            if isinstance(f, Eq):
                clauses.append("JSON_EXTRACT(data, %s) = CAST(%s AS JSON)")
                params.extend([path, json.dumps(f.value)])
            elif isinstance(f, Gte):
                clauses.append("JSON_UNQUOTE(JSON_EXTRACT(data, %s)) >= %s")
                params.extend([path, str(f.value)])
            elif isinstance(f, Lte):
                clauses.append("JSON_UNQUOTE(JSON_EXTRACT(data, %s)) <= %s")
                params.extend([path, str(f.value)])
            else:
                raise ValidationError(f"Unsupported filter: {f!r}")

        order_sql = ""
        if order_by:
            parts = []
            for o in order_by:
                parts.append(f"JSON_UNQUOTE(JSON_EXTRACT(data, %s)) {'DESC' if o.descending else 'ASC'}")
                params.append(_json_path(o.field))
            order_sql = "ORDER BY " + ", ".join(parts)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT doc_id, data, created_at, updated_at
                FROM documents
                WHERE {where}
                {order_sql}
                """,
                tuple(params),
            )
            return [self._to_document(r) for r in fetchall(cur)]

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT doc_id, data, created_at, updated_at FROM documents WHERE collection=%s AND doc_id=%s",
                (collection, doc_id),
            )
            r = fetchone(cur)
            return self._to_document(r) if r else None

    def create(self, collection: str, fields: Document, *, doc_id: Optional[str] = None) -> Document:
        doc_id = doc_id or str(uuid.uuid4())
        data = {k: v for k, v in fields.items() if k not in {"id", "createdAt", "updatedAt"}}
        stamp = now_local().replace(microsecond=0)
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO documents(collection, doc_id, data, created_at, updated_at)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (collection, doc_id, json.dumps(data, ensure_ascii=False), stamp, stamp),
                )
        except mysql.connector.IntegrityError:
            raise ValidationError(f"Document already exists: {collection}/{doc_id}", field="id") from None

        iso = stamp.isoformat()
        return {**data, "id": doc_id, "createdAt": iso, "updatedAt": iso}

    def update(self, collection: str, doc_id: str, fields: Document) -> Document:
        stamp = now_local().replace(microsecond=0)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT doc_id, data, created_at, updated_at FROM documents WHERE collection=%s AND doc_id=%s FOR UPDATE",
                (collection, doc_id),
            )
            r = fetchone(cur)
            if not r:
                raise NotFoundError(collection, doc_id)

            current = self._to_document(r)
            data = {k: v for k, v in current.items() if k not in {"id", "createdAt", "updatedAt"}}
            data.update({k: v for k, v in fields.items() if k not in {"id", "createdAt", "updatedAt"}})

            cur.execute(
                "UPDATE documents SET data=%s, updated_at=%s WHERE collection=%s AND doc_id=%s",
                (json.dumps(data, ensure_ascii=False), stamp, collection, doc_id),
            )
            return {**data, "id": doc_id, "createdAt": current["createdAt"], "updatedAt": stamp.isoformat()}

    def delete(self, collection: str, doc_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM documents WHERE collection=%s AND doc_id=%s", (collection, doc_id))
            return cur.rowcount > 0

    def _to_document(self, r: dict) -> Document:
        data = r["data"]
        if isinstance(data, (bytes, bytearray)):
            data = data.decode("utf-8")
        doc = json.loads(data) if isinstance(data, str) else dict(data or {})
        doc["id"] = r["doc_id"]
        doc["createdAt"] = r["created_at"].isoformat() if r.get("created_at") else None
        doc["updatedAt"] = r["updated_at"].isoformat() if r.get("updated_at") else None
        return doc
