from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Document
from .repository import DocumentRepository

_DOC_COLUMNS = "document_id, name, file_name, storage_path, content_type, size_bytes, uploaded_by, uploaded_at"


def _row_to_document(row: dict) -> Document:
    return Document(
        document_id=int(row["document_id"]),
        name=row["name"],
        file_name=row["file_name"],
        storage_path=row["storage_path"],
        content_type=row.get("content_type"),
        size_bytes=int(row.get("size_bytes") or 0),
        uploaded_by=row.get("uploaded_by"),
        uploaded_at=row.get("uploaded_at"),
    )


class MySQLDocumentRepository(DocumentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, document_id: int) -> Optional[Document]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_DOC_COLUMNS} FROM documents WHERE document_id=%s", (document_id,))
            row = fetchone(cur)
            return _row_to_document(row) if row else None

    def list_all(self) -> Sequence[Document]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_DOC_COLUMNS} FROM documents ORDER BY uploaded_at DESC, document_id DESC")
            return [_row_to_document(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        name: str,
        file_name: str,
        storage_path: str,
        content_type: Optional[str],
        size_bytes: int,
        uploaded_by: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO documents(name, file_name, storage_path, content_type, size_bytes, uploaded_by)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (name, file_name, storage_path, content_type, size_bytes, uploaded_by),
            )
            return int(cur.lastrowid)

    def delete_by_id(self, document_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM documents WHERE document_id=%s", (document_id,))
            return cur.rowcount > 0
