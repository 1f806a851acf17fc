"""Process-local repositories, used by default and in tests.

Records are copied on the way in and out so callers never share mutable
state with the store. Ordering follows insertion order.
"""

import threading
from collections.abc import Iterable
from dataclasses import replace

from docflow.database.models import (
    AnalysisRecord,
    DocumentRecord,
    DocumentStatus,
    FeedbackRecord,
    utcnow,
)
from docflow.database.repositories.base import (
    AnalysisRepository,
    DocumentRepository,
    FeedbackRepository,
)
from docflow.exceptions import NotFoundError


class InMemoryDocumentRepository(DocumentRepository):
    def __init__(self) -> None:
        self._rows: dict[str, DocumentRecord] = {}
        self._lock = threading.Lock()

    def insert(self, document: DocumentRecord) -> None:
        with self._lock:
            self._rows[document.id] = replace(document)

    def find_by_id(self, document_id: str) -> DocumentRecord:
        with self._lock:
            row = self._rows.get(document_id)
            if row is None:
                raise NotFoundError("Document not found")
            return replace(row)

    def update_status(self, document_id: str, status: DocumentStatus) -> None:
        with self._lock:
            row = self._rows.get(document_id)
            if row is None:
                raise NotFoundError("Document not found")
            row.status = status
            row.updated_at = utcnow()

    def list_recent(self) -> list[DocumentRecord]:
        with self._lock:
            return [replace(row) for row in reversed(self._rows.values())]

    def list_by_ids(self, document_ids: Iterable[str]) -> list[DocumentRecord]:
        wanted = set(document_ids)
        with self._lock:
            return [replace(row) for row in reversed(self._rows.values()) if row.id in wanted]


class InMemoryAnalysisRepository(AnalysisRepository):
    def __init__(self) -> None:
        self._rows: dict[str, AnalysisRecord] = {}
        self._lock = threading.Lock()

    def insert(self, analysis: AnalysisRecord) -> None:
        with self._lock:
            self._rows[analysis.id] = replace(analysis)

    def find_by_id(
        self,
        analysis_id: str,
        document_id: str | None = None,
    ) -> AnalysisRecord | None:
        with self._lock:
            row = self._rows.get(analysis_id)
            if row is None or (document_id is not None and row.document_id != document_id):
                return None
            return replace(row)

    def find_latest_for_document(self, document_id: str) -> AnalysisRecord | None:
        rows = self.list_for_documents([document_id])
        return rows[0] if rows else None

    def list_for_documents(self, document_ids: Iterable[str]) -> list[AnalysisRecord]:
        wanted = set(document_ids)
        with self._lock:
            return [
                replace(row) for row in reversed(self._rows.values()) if row.document_id in wanted
            ]

    def list_with_workflow(self) -> list[AnalysisRecord]:
        with self._lock:
            return [
                replace(row)
                for row in reversed(self._rows.values())
                if row.workflow_instance_id or row.workflow_status
            ]

    def mark_feedback_provided(self, analysis_id: str) -> None:
        with self._lock:
            row = self._require(analysis_id)
            row.feedback_provided = True
            row.feedback_required = False
            row.updated_at = utcnow()

    def attach_workflow_result(
        self,
        analysis_id: str,
        instance_id: str | None,
        status: str,
    ) -> None:
        with self._lock:
            row = self._require(analysis_id)
            row.workflow_instance_id = instance_id
            row.workflow_status = status
            row.updated_at = utcnow()

    def _require(self, analysis_id: str) -> AnalysisRecord:
        row = self._rows.get(analysis_id)
        if row is None:
            raise NotFoundError("Analysis not found")
        return row


class InMemoryFeedbackRepository(FeedbackRepository):
    def __init__(self) -> None:
        self._rows: list[FeedbackRecord] = []
        self._lock = threading.Lock()

    def insert(self, feedback: FeedbackRecord) -> None:
        with self._lock:
            self._rows.append(feedback)

    def list_for_analyses(self, analysis_ids: Iterable[str]) -> list[FeedbackRecord]:
        wanted = set(analysis_ids)
        with self._lock:
            return [row for row in reversed(self._rows) if row.analysis_id in wanted]
