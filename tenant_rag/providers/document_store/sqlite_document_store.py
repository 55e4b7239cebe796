"""SQLite-backed document metadata store.

Persists one row per uploaded document to a local SQLite database at
``data/documents.db``.  Uses ``aiosqlite`` for async I/O.  Every query is
filtered by ``tenant_id`` so one tenant can never read another's rows.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from tenant_rag.interfaces.document_store import IDocumentStore
from tenant_rag.models.document import Document, DocumentStatus

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/documents.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS documents (
    id            TEXT    PRIMARY KEY,
    tenant_id     TEXT    NOT NULL,
    filename      TEXT    NOT NULL,
    mime_type     TEXT    NOT NULL DEFAULT '',
    size_bytes    INTEGER NOT NULL DEFAULT 0,
    chunk_count   INTEGER NOT NULL DEFAULT 0,
    page_count    INTEGER NOT NULL DEFAULT 0,
    status        TEXT    NOT NULL,
    error_message TEXT,
    created_at    TEXT    NOT NULL,
    updated_at    TEXT    NOT NULL
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_documents_tenant ON documents(tenant_id);",
    "CREATE INDEX IF NOT EXISTS idx_documents_tenant_status ON documents(tenant_id, status);",
]

_INSERT_SQL = """\
INSERT INTO documents (
    id, tenant_id, filename, mime_type, size_bytes, chunk_count,
    page_count, status, error_message, created_at, updated_at
) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
"""

_SELECT_COLUMNS = (
    "id, tenant_id, filename, mime_type, size_bytes, chunk_count, "
    "page_count, status, error_message, created_at, updated_at"
)


def _row_to_document(row: Any) -> Document:
    data = dict(row)
    data["status"] = DocumentStatus(data["status"])
    return Document(**data)


class SQLiteDocumentStore(IDocumentStore):
    """SQLite-backed document metadata persistence."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the documents table and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_CREATE_TABLE_SQL)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("document_db_initialized", path=str(self._db_path))

    async def create(self, document: Document) -> Document:
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(
                _INSERT_SQL,
                (
                    document.id,
                    document.tenant_id,
                    document.filename,
                    document.mime_type,
                    document.size_bytes,
                    document.chunk_count,
                    document.page_count,
                    document.status.value,
                    document.error_message,
                    document.created_at.isoformat(),
                    document.updated_at.isoformat(),
                ),
            )
            await db.commit()
        logger.info(
            "document_created",
            document_id=document.id,
            tenant_id=document.tenant_id,
            filename=document.filename,
        )
        return document

    async def update_status(
        self,
        document_id: str,
        *,
        tenant_id: str,
        status: DocumentStatus,
        chunk_count: int | None = None,
        page_count: int | None = None,
        error_message: str | None = None,
    ) -> Document | None:
        assignments = ["status = ?", "updated_at = ?", "error_message = ?"]
        params: list[Any] = [
            status.value,
            datetime.now(tz=timezone.utc).isoformat(),
            error_message,
        ]
        if chunk_count is not None:
            assignments.append("chunk_count = ?")
            params.append(chunk_count)
        if page_count is not None:
            assignments.append("page_count = ?")
            params.append(page_count)
        params.extend([document_id, tenant_id])

        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(
                f"UPDATE documents SET {', '.join(assignments)} "
                "WHERE id = ? AND tenant_id = ?",
                params,
            )
            await db.commit()

        logger.info(
            "document_status_updated",
            document_id=document_id,
            tenant_id=tenant_id,
            status=status.value,
        )
        return await self.get(document_id, tenant_id=tenant_id)

    async def get(self, document_id: str, *, tenant_id: str) -> Document | None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                f"SELECT {_SELECT_COLUMNS} FROM documents WHERE id = ? AND tenant_id = ?",
                (document_id, tenant_id),
            )
            row = await cursor.fetchone()
        return _row_to_document(row) if row else None

    async def list_documents(self, *, tenant_id: str) -> list[Document]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                f"SELECT {_SELECT_COLUMNS} FROM documents WHERE tenant_id = ? "
                "ORDER BY created_at DESC",
                (tenant_id,),
            )
            rows = await cursor.fetchall()
        return [_row_to_document(r) for r in rows]

    async def delete(self, document_id: str, *, tenant_id: str) -> bool:
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute(
                "DELETE FROM documents WHERE id = ? AND tenant_id = ?",
                (document_id, tenant_id),
            )
            await db.commit()
            deleted = cursor.rowcount > 0
        logger.info(
            "document_deleted",
            document_id=document_id,
            tenant_id=tenant_id,
            deleted=deleted,
        )
        return deleted
