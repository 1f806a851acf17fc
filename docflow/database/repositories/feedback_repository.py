from collections.abc import Iterable

from psycopg.rows import dict_row

from docflow.database.connection import get_connection
from docflow.database.models import FeedbackRecord
from docflow.database.repositories.base import FeedbackRepository


class PostgresFeedbackRepository(FeedbackRepository):
    """Database operations for the document_feedback table."""

    def insert(self, feedback: FeedbackRecord) -> None:
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO document_feedback
                (id, analysis_id, corrections, comments, submitted_by, created_at)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                (
                    feedback.id,
                    feedback.analysis_id,
                    feedback.corrections,
                    feedback.comments,
                    feedback.submitted_by,
                    feedback.created_at,
                ),
            )
            conn.commit()

    def list_for_analyses(self, analysis_ids: Iterable[str]) -> list[FeedbackRecord]:
        ids = list(analysis_ids)
        if not ids:
            return []
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, analysis_id, corrections, comments, submitted_by, created_at
                    FROM document_feedback
                    WHERE analysis_id = ANY(%s)
                    ORDER BY created_at DESC
                    """,
                    (ids,),
                )
                rows = cur.fetchall()
        return [FeedbackRecord(**row) for row in rows]
