"""SQLite-backed document store with async support."""

import json
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite
from loguru import logger

from tradejournal.config import settings
from tradejournal.db.store import DocumentStore, deep_merge, split_path
from tradejournal.errors import DocumentExistsError, DocumentNotFoundError, StoreError

SCHEMA = """
CREATE TABLE IF NOT EXISTS documents (
    collection TEXT NOT NULL,
    doc_id TEXT NOT NULL,
    payload_json TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    PRIMARY KEY (collection, doc_id)
)
"""


class SQLiteDocumentStore(DocumentStore):
    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or settings.db_path
        self._db: aiosqlite.Connection | None = None

    async def connect(self):
        """Connect to SQLite and create the documents table."""
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(self.db_path)
        self._db.row_factory = aiosqlite.Row
        await self._db.execute("PRAGMA journal_mode=WAL")
        await self._db.execute("PRAGMA synchronous=NORMAL")
        await self._db.execute(f"PRAGMA cache_size=-{settings.db_cache_mb * 1024}")
        await self._db.execute(SCHEMA)
        await self._db.commit()
        logger.info(f"Document store connected: {self.db_path}")

    async def disconnect(self):
        if self._db:
            await self._db.close()
            self._db = None
            logger.info("Document store disconnected")

    @property
    def db(self) -> aiosqlite.Connection:
        if self._db is None:
            raise StoreError("Document store not connected")
        return self._db

    async def create_document(
        self, collection: str, payload: dict[str, Any], doc_id: str | None = None
    ) -> str:
        doc_id = doc_id or uuid.uuid4().hex
        now = datetime.now().isoformat()
        try:
            await self.db.execute(
                """INSERT INTO documents (collection, doc_id, payload_json, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?)""",
                (collection, doc_id, json.dumps(payload), now, now),
            )
        except aiosqlite.IntegrityError:
            raise DocumentExistsError(f"{collection}/{doc_id}") from None
        await self.db.commit()
        return doc_id

    async def get_document(self, path: str) -> dict[str, Any] | None:
        collection, doc_id = split_path(path)
        cursor = await self.db.execute(
            "SELECT payload_json FROM documents WHERE collection = ? AND doc_id = ?",
            (collection, doc_id),
        )
        row = await cursor.fetchone()
        if not row:
            return None
        return json.loads(row["payload_json"])

    async def list_documents(self, collection: str) -> list[dict[str, Any]]:
        cursor = await self.db.execute(
            "SELECT payload_json FROM documents WHERE collection = ? ORDER BY created_at, doc_id",
            (collection,),
        )
        rows = await cursor.fetchall()
        return [json.loads(r["payload_json"]) for r in rows]

    async def merge_update(self, path: str, partial: dict[str, Any]) -> None:
        current = await self.get_document(path)
        if current is None:
            raise DocumentNotFoundError(path)
        collection, doc_id = split_path(path)
        await self.db.execute(
            "UPDATE documents SET payload_json = ?, updated_at = ? WHERE collection = ? AND doc_id = ?",
            (
                json.dumps(deep_merge(current, partial)),
                datetime.now().isoformat(),
                collection,
                doc_id,
            ),
        )
        await self.db.commit()

    async def delete(self, path: str) -> None:
        collection, doc_id = split_path(path)
        cursor = await self.db.execute(
            "DELETE FROM documents WHERE collection = ? AND doc_id = ?",
            (collection, doc_id),
        )
        await self.db.commit()
        if cursor.rowcount == 0:
            raise DocumentNotFoundError(path)
