"""
SQLite document store implementation.

Persists the document corpus across restarts using aiosqlite.
"""

import json
from datetime import datetime
from pathlib import Path

import aiosqlite

from docassets.core.document_store.base import DocumentStore
from docassets.models.document import Document
from docassets.utils.exceptions import DocumentStoreError, NotFoundError
from docassets.utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, title, content, asset_ids, created_at, updated_at, updated_by"


class SQLiteDocumentStore(DocumentStore):
    """
    SQLite-based document corpus.

    Features:
    - Insertion order preserved through an autoincrement sequence column
    - Reference list stored as JSON next to the content, written in one statement
    - Primary-key lookup by document ID
    """

    def __init__(self, db_path: str = "data/docassets.db"):
        """
        Initialize SQLite document store.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self.connection: aiosqlite.Connection | None = None

        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    async def connect(self) -> None:
        """Establish connection to SQLite."""
        if self.connection is None:
            self.connection = await aiosqlite.connect(self.db_path)
            await self.connection.execute("PRAGMA journal_mode = WAL")
            await self.connection.commit()

    async def initialize(self) -> None:
        """Initialize database schema."""
        await self.connect()

        await self.connection.execute(
            """
            CREATE TABLE IF NOT EXISTS documents (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                title TEXT NOT NULL,
                content TEXT NOT NULL,
                asset_ids TEXT NOT NULL DEFAULT '[]',
                created_at TEXT NOT NULL,
                updated_at TEXT,
                updated_by TEXT
            )
        """
        )
        await self.connection.commit()
        logger.info(f"SQLite document store ready at {self.db_path}")

    async def add(self, document: Document) -> None:
        await self.connect()

        try:
            await self.connection.execute(
                f"INSERT INTO documents ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                self._document_to_row(document),
            )
            await self.connection.commit()
        except aiosqlite.Error as e:
            raise DocumentStoreError(
                f"Failed to insert document {document.id}: {e}",
                context={"document_id": document.id},
            ) from e

    async def get(self, document_id: str) -> Document | None:
        await self.connect()

        cursor = await self.connection.execute(
            f"SELECT {_COLUMNS} FROM documents WHERE id = ?", (document_id,)
        )
        row = await cursor.fetchone()

        if not row:
            return None

        return self._row_to_document(row)

    async def update(self, document: Document) -> None:
        await self.connect()

        try:
            cursor = await self.connection.execute(
                """
                UPDATE documents
                SET title = ?, content = ?, asset_ids = ?, created_at = ?,
                    updated_at = ?, updated_by = ?
                WHERE id = ?
                """,
                (*self._document_to_row(document)[1:], document.id),
            )
            await self.connection.commit()
        except aiosqlite.Error as e:
            raise DocumentStoreError(
                f"Failed to update document {document.id}: {e}",
                context={"document_id": document.id},
            ) from e

        if cursor.rowcount == 0:
            raise NotFoundError(
                f"Document not found: {document.id}", context={"document_id": document.id}
            )

    async def delete(self, document_id: str) -> bool:
        await self.connect()

        try:
            cursor = await self.connection.execute(
                "DELETE FROM documents WHERE id = ?", (document_id,)
            )
            await self.connection.commit()
        except aiosqlite.Error as e:
            raise DocumentStoreError(
                f"Failed to delete document {document_id}: {e}",
                context={"document_id": document_id},
            ) from e

        return cursor.rowcount > 0

    async def list_documents(self) -> list[Document]:
        await self.connect()

        cursor = await self.connection.execute(f"SELECT {_COLUMNS} FROM documents ORDER BY seq")
        rows = await cursor.fetchall()

        return [self._row_to_document(row) for row in rows]

    async def count(self) -> int:
        await self.connect()

        cursor = await self.connection.execute("SELECT COUNT(*) FROM documents")
        row = await cursor.fetchone()
        return row[0]

    async def close(self) -> None:
        """Close the connection."""
        if self.connection is not None:
            await self.connection.close()
            self.connection = None

    # ═══════════════════════════════════════════════════════════
    # HELPER METHODS
    # ═══════════════════════════════════════════════════════════

    def _document_to_row(self, document: Document) -> tuple:
        return (
            document.id,
            document.title,
            document.content,
            json.dumps(sorted(document.asset_ids)),
            document.created_at.isoformat(),
            document.updated_at.isoformat() if document.updated_at else None,
            document.updated_by,
        )

    def _row_to_document(self, row: tuple) -> Document:
        """Convert database row to Document object."""
        return Document(
            id=row[0],
            title=row[1],
            content=row[2],
            asset_ids=json.loads(row[3]) if row[3] else [],
            created_at=datetime.fromisoformat(row[4]),
            updated_at=datetime.fromisoformat(row[5]) if row[5] else None,
            updated_by=row[6],
        )
