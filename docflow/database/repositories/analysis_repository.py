from collections.abc import Iterable
from typing import Any

from psycopg.rows import dict_row

from docflow.database.connection import get_connection
from docflow.database.models import AnalysisRecord
from docflow.database.repositories.base import AnalysisRepository
from docflow.exceptions import NotFoundError

_COLUMNS = """
    id, document_id, prompt, response, amount, vendor, date, risk_level,
    confidence, feedback_required, feedback_provided, workflow_instance_id,
    workflow_status, created_at, updated_at
"""


class PostgresAnalysisRepository(AnalysisRepository):
    """Database operations for the document_analyses table."""

    def insert(self, analysis: AnalysisRecord) -> None:
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO document_analyses
                (id, document_id, prompt, response, amount, vendor, date,
                 risk_level, confidence, feedback_required, feedback_provided,
                 created_at)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    analysis.id,
                    analysis.document_id,
                    analysis.prompt,
                    analysis.response,
                    analysis.amount,
                    analysis.vendor,
                    analysis.date,
                    analysis.risk_level,
                    analysis.confidence,
                    analysis.feedback_required,
                    analysis.feedback_provided,
                    analysis.created_at,
                ),
            )
            conn.commit()

    def find_by_id(
        self,
        analysis_id: str,
        document_id: str | None = None,
    ) -> AnalysisRecord | None:
        query = f"SELECT {_COLUMNS} FROM document_analyses WHERE id = %s"
        params: tuple[Any, ...] = (analysis_id,)
        if document_id is not None:
            query += " AND document_id = %s"
            params = (analysis_id, document_id)
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(query, params)
                row = cur.fetchone()
        return _to_record(row) if row is not None else None

    def find_latest_for_document(self, document_id: str) -> AnalysisRecord | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS} FROM document_analyses
                    WHERE document_id = %s
                    ORDER BY created_at DESC
                    LIMIT 1
                    """,
                    (document_id,),
                )
                row = cur.fetchone()
        return _to_record(row) if row is not None else None

    def list_for_documents(self, document_ids: Iterable[str]) -> list[AnalysisRecord]:
        ids = list(document_ids)
        if not ids:
            return []
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS} FROM document_analyses
                    WHERE document_id = ANY(%s)
                    ORDER BY created_at DESC
                    """,
                    (ids,),
                )
                rows = cur.fetchall()
        return [_to_record(row) for row in rows]

    def list_with_workflow(self) -> list[AnalysisRecord]:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS} FROM document_analyses
                    WHERE workflow_instance_id IS NOT NULL OR workflow_status IS NOT NULL
                    ORDER BY created_at DESC
                    """
                )
                rows = cur.fetchall()
        return [_to_record(row) for row in rows]

    def mark_feedback_provided(self, analysis_id: str) -> None:
        self._update(
            """
            UPDATE document_analyses
            SET feedback_provided = TRUE, feedback_required = FALSE, updated_at = NOW()
            WHERE id = %s
            """,
            (analysis_id,),
        )

    def attach_workflow_result(
        self,
        analysis_id: str,
        instance_id: str | None,
        status: str,
    ) -> None:
        self._update(
            """
            UPDATE document_analyses
            SET workflow_instance_id = %s, workflow_status = %s, updated_at = NOW()
            WHERE id = %s
            """,
            (instance_id, status, analysis_id),
        )

    @staticmethod
    def _update(query: str, params: tuple[Any, ...]) -> None:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                if cur.rowcount == 0:
                    raise NotFoundError("Analysis not found")
            conn.commit()


def _to_record(row: dict[str, Any]) -> AnalysisRecord:
    return AnalysisRecord(**row)
