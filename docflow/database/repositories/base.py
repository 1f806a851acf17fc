from abc import ABC, abstractmethod
from collections.abc import Iterable

from docflow.database.models import AnalysisRecord, DocumentRecord, DocumentStatus, FeedbackRecord


class DocumentRepository(ABC):
    """Storage contract for documents."""

    @abstractmethod
    def insert(self, document: DocumentRecord) -> None: ...

    @abstractmethod
    def find_by_id(self, document_id: str) -> DocumentRecord:
        """Return the document.

        Raises:
            NotFoundError: if no document with this id exists.
        """

    @abstractmethod
    def update_status(self, document_id: str, status: DocumentStatus) -> None: ...

    @abstractmethod
    def list_recent(self) -> list[DocumentRecord]:
        """All documents, newest first."""

    @abstractmethod
    def list_by_ids(self, document_ids: Iterable[str]) -> list[DocumentRecord]: ...


class AnalysisRepository(ABC):
    """Storage contract for document analyses."""

    @abstractmethod
    def insert(self, analysis: AnalysisRecord) -> None: ...

    @abstractmethod
    def find_by_id(
        self,
        analysis_id: str,
        document_id: str | None = None,
    ) -> AnalysisRecord | None:
        """Return the analysis, optionally only if it belongs to ``document_id``."""

    @abstractmethod
    def find_latest_for_document(self, document_id: str) -> AnalysisRecord | None: ...

    @abstractmethod
    def list_for_documents(self, document_ids: Iterable[str]) -> list[AnalysisRecord]:
        """Analyses of the given documents, newest first."""

    @abstractmethod
    def list_with_workflow(self) -> list[AnalysisRecord]:
        """Analyses that started a workflow instance, newest first."""

    @abstractmethod
    def mark_feedback_provided(self, analysis_id: str) -> None:
        """Set feedback_provided and clear feedback_required."""

    @abstractmethod
    def attach_workflow_result(
        self,
        analysis_id: str,
        instance_id: str | None,
        status: str,
    ) -> None: ...


class FeedbackRepository(ABC):
    """Storage contract for reviewer feedback."""

    @abstractmethod
    def insert(self, feedback: FeedbackRecord) -> None: ...

    @abstractmethod
    def list_for_analyses(self, analysis_ids: Iterable[str]) -> list[FeedbackRecord]:
        """Feedback for the given analyses, newest first."""
