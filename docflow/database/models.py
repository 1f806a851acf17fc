from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class DocumentStatus(str, Enum):
    UPLOADED = "UPLOADED"
    PROCESSED = "PROCESSED"
    ANALYZED = "ANALYZED"
    ROUTED = "ROUTED"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)

    def advances_to(self, target: "DocumentStatus") -> bool:
        """True if moving from this status to ``target`` is a forward step."""
        return target.rank > self.rank


_STATUS_ORDER = list(DocumentStatus)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class DocumentRecord:
    """Represents a row from the documents table."""

    id: str
    title: str | None = None
    description: str | None = None
    file_name: str | None = None
    mime_type: str | None = None
    file_size: int = 0
    content_path: str | None = None
    extracted_text: str = ""
    status: DocumentStatus = DocumentStatus.UPLOADED
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None

    def summary(self) -> dict[str, object]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "fileName": self.file_name,
            "mimeType": self.mime_type,
            "fileSize": self.file_size,
            "status": self.status.value,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass
class AnalysisRecord:
    """Represents a row from the document_analyses table."""

    id: str
    document_id: str
    prompt: str
    response: str
    amount: float | None = None
    vendor: str | None = None
    date: str | None = None
    risk_level: str | None = None
    confidence: float | None = None
    feedback_required: bool = True
    feedback_provided: bool = False
    workflow_instance_id: str | None = None
    workflow_status: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None

    def summary(self) -> dict[str, object]:
        return {
            "id": self.id,
            "documentId": self.document_id,
            "amount": self.amount,
            "vendor": self.vendor,
            "date": self.date,
            "riskLevel": self.risk_level,
            "confidence": self.confidence,
            "feedbackRequired": self.feedback_required,
            "feedbackProvided": self.feedback_provided,
            "workflowInstanceId": self.workflow_instance_id,
            "workflowStatus": self.workflow_status,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class FeedbackRecord:
    """Represents a row from the document_feedback table. Never updated."""

    id: str
    analysis_id: str
    corrections: str
    comments: str | None = None
    submitted_by: str = "anonymous"
    created_at: datetime = field(default_factory=utcnow)

    def summary(self) -> dict[str, object]:
        return {
            "id": self.id,
            "analysisId": self.analysis_id,
            "corrections": self.corrections,
            "comments": self.comments,
            "submittedBy": self.submitted_by,
            "createdAt": self.created_at.isoformat(),
        }
