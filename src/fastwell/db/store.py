"""Document store over SQLite.

Collections of JSON documents keyed by an opaque id, queried by field
filters with optional ordering and limit. Every write is published to a
ChangeFeed so observers can follow a single document.
"""

import json
import re
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any
from uuid import uuid4

import aiosqlite

from ..exceptions import DocumentNotFoundError, InvalidInputError
from ..models.timestamps import to_iso
from ..services.channels import ChangeCallback, ChangeFeed, Subscription
from .engine import get_db_path

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")

_OPERATORS = {"==": "=", "!=": "!=", "<": "<", "<=": "<=", ">": ">", ">=": ">="}

Filter = tuple[str, str, Any]


def _field_expr(field: str) -> str:
    if not _FIELD_RE.match(field):
        raise InvalidInputError(f"Invalid field name: {field!r}")
    return f"json_extract(data, '$.{field}')"


def _to_storable(value: Any) -> Any:
    if isinstance(value, datetime):
        return to_iso(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _to_storable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_storable(v) for v in value]
    return value


def _deep_merge(base: dict, patch: dict) -> dict:
    merged = dict(base)
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _build_where(collection: str, filters: list[Filter] | None) -> tuple[str, list]:
    clauses = ["collection = ?"]
    params: list = [collection]
    for field, op, value in filters or []:
        if op not in _OPERATORS:
            raise InvalidInputError(f"Unsupported filter operator: {op!r}")
        expr = _field_expr(field)
        value = _to_storable(value)
        if value is None and op in ("==", "!="):
            clauses.append(f"{expr} IS {'NOT ' if op == '!=' else ''}NULL")
            continue
        clauses.append(f"{expr} {_OPERATORS[op]} ?")
        params.append(value)
    return " AND ".join(clauses), params


class DocumentStore:
    """Async document store backed by a single SQLite table."""

    def __init__(self, db_path: Path | None = None, feed: ChangeFeed | None = None):
        self.db_path = db_path or get_db_path()
        self.feed = feed or ChangeFeed()

    async def create(self, collection: str, doc: dict, doc_id: str | None = None) -> str:
        """Insert a new document and return its id."""
        doc_id = doc_id or uuid4().hex
        data = _to_storable(doc)
        async with aiosqlite.connect(self.db_path) as db:
            try:
                await db.execute(
                    "INSERT INTO documents (collection, id, user_id, data) VALUES (?, ?, ?, ?)",
                    (collection, doc_id, self._owner(data), json.dumps(data)),
                )
            except aiosqlite.IntegrityError:
                raise InvalidInputError(f"Document '{doc_id}' already exists in '{collection}'")
            await db.commit()
        self.feed.publish(collection, doc_id, {**data, "id": doc_id})
        return doc_id

    async def get(self, collection: str, doc_id: str) -> dict | None:
        """Get a document by id, or None."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT data FROM documents WHERE collection = ? AND id = ?",
                (collection, doc_id),
            )
            row = await cursor.fetchone()
        if row is None:
            return None
        return {**json.loads(row[0]), "id": doc_id}

    async def set(self, collection: str, doc_id: str, doc: dict, merge: bool = True) -> None:
        """Create or overwrite a document; with merge, nested objects are merged."""
        data = _to_storable(doc)
        existing = await self.get(collection, doc_id)
        if existing is not None and merge:
            existing.pop("id")
            data = _deep_merge(existing, data)

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO documents (collection, id, user_id, data) VALUES (?, ?, ?, ?)
                ON CONFLICT (collection, id) DO UPDATE SET
                    user_id = excluded.user_id,
                    data = excluded.data,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (collection, doc_id, self._owner(data), json.dumps(data)),
            )
            await db.commit()
        self.feed.publish(collection, doc_id, {**data, "id": doc_id})

    async def update(self, collection: str, doc_id: str, patch: dict) -> dict:
        """Replace the given top-level fields of an existing document."""
        existing = await self.get(collection, doc_id)
        if existing is None:
            raise DocumentNotFoundError(collection, doc_id)
        existing.pop("id")
        data = {**existing, **_to_storable(patch)}

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                UPDATE documents SET data = ?, user_id = ?, updated_at = CURRENT_TIMESTAMP
                WHERE collection = ? AND id = ?
                """,
                (json.dumps(data), self._owner(data), collection, doc_id),
            )
            await db.commit()
        document = {**data, "id": doc_id}
        self.feed.publish(collection, doc_id, document)
        return document

    async def query(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        """Find documents matching all filters.

        Args:
            collection: Collection name
            filters: (field, operator, value) triples, e.g. ("status", "==", "active")
            order_by: Field to sort on
            descending: Sort direction
            limit: Maximum number of documents

        Returns:
            Matching documents, each with its "id"
        """
        where, params = _build_where(collection, filters)
        sql = f"SELECT id, data FROM documents WHERE {where}"
        if order_by:
            sql += f" ORDER BY {_field_expr(order_by)} {'DESC' if descending else 'ASC'}"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(sql, params)
            rows = await cursor.fetchall()
        return [{**json.loads(row[1]), "id": row[0]} for row in rows]

    async def count(self, collection: str, filters: list[Filter] | None = None) -> int:
        """Count documents matching all filters."""
        where, params = _build_where(collection, filters)
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(f"SELECT COUNT(*) FROM documents WHERE {where}", params)
            row = await cursor.fetchone()
        return row[0]

    async def subscribe(
        self, collection: str, doc_id: str, on_change: ChangeCallback
    ) -> Subscription:
        """Follow one document.

        on_change receives the current document right away (when it exists)
        and again after every mutation until the subscription is cancelled.
        """
        changed = False

        def forward(document: dict) -> None:
            nonlocal changed
            changed = True
            on_change(document)

        subscription = self.feed.subscribe(collection, doc_id, forward)
        current = await self.get(collection, doc_id)
        # A change published while reading is newer than what was read
        if current is not None and not changed:
            on_change(current)
        return subscription

    @staticmethod
    def _owner(data: dict) -> str | None:
        return data.get("userId") or data.get("uid")
