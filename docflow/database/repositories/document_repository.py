from collections.abc import Iterable
from typing import Any

from psycopg.rows import dict_row

from docflow.database.connection import get_connection
from docflow.database.models import DocumentRecord, DocumentStatus
from docflow.database.repositories.base import DocumentRepository
from docflow.exceptions import NotFoundError

_COLUMNS = """
    id, title, description, file_name, mime_type, file_size, content_path,
    extracted_text, status, created_at, updated_at
"""


class PostgresDocumentRepository(DocumentRepository):
    """Database operations for the documents table."""

    def insert(self, document: DocumentRecord) -> None:
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO documents
                (id, title, description, file_name, mime_type, file_size,
                 content_path, extracted_text, status, created_at)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    document.id,
                    document.title,
                    document.description,
                    document.file_name,
                    document.mime_type,
                    document.file_size,
                    document.content_path,
                    document.extracted_text,
                    document.status.value,
                    document.created_at,
                ),
            )
            conn.commit()

    def find_by_id(self, document_id: str) -> DocumentRecord:
        """Find a document by id.

        Raises:
            NotFoundError: if no document with this id exists.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(f"SELECT {_COLUMNS} FROM documents WHERE id = %s", (document_id,))
                row = cur.fetchone()

        if row is None:
            raise NotFoundError("Document not found")
        return _to_record(row)

    def update_status(self, document_id: str, status: DocumentStatus) -> None:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE documents
                    SET status = %s, updated_at = NOW()
                    WHERE id = %s
                    """,
                    (status.value, document_id),
                )
                if cur.rowcount == 0:
                    raise NotFoundError("Document not found")
            conn.commit()

    def list_recent(self) -> list[DocumentRecord]:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(f"SELECT {_COLUMNS} FROM documents ORDER BY created_at DESC")
                rows = cur.fetchall()
        return [_to_record(row) for row in rows]

    def list_by_ids(self, document_ids: Iterable[str]) -> list[DocumentRecord]:
        ids = list(document_ids)
        if not ids:
            return []
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM documents WHERE id = ANY(%s) "
                    "ORDER BY created_at DESC",
                    (ids,),
                )
                rows = cur.fetchall()
        return [_to_record(row) for row in rows]


def _to_record(row: dict[str, Any]) -> DocumentRecord:
    return DocumentRecord(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        file_name=row["file_name"],
        mime_type=row["mime_type"],
        file_size=row["file_size"],
        content_path=row["content_path"],
        extracted_text=row["extracted_text"],
        status=DocumentStatus(row["status"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
