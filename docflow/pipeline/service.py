import json
import uuid
from pathlib import Path
from typing import Any

from docflow.analysis.client_base import BaseAnalysisClient
from docflow.analysis.factory import AnalysisClientFactory
from docflow.analysis.parser import parse_analysis_result
from docflow.analysis.prompt_builder import build_analysis_prompt
from docflow.config.settings import Settings
from docflow.database.factory import Repositories, RepositoryFactory
from docflow.database.models import (
    AnalysisRecord,
    DocumentRecord,
    DocumentStatus,
    FeedbackRecord,
)
from docflow.exceptions import DocumentValidationError, NotFoundError, PipelineError
from docflow.logging.logger import Log
from docflow.pdf.base import BasePdfExtractor
from docflow.pdf.exceptions import PdfExtractionError
from docflow.pdf.factory import PdfExtractorFactory
from docflow.pipeline.file_store import FileStore
from docflow.pipeline.models import UploadPayload
from docflow.pipeline.validation import validate_payload
from docflow.pipeline.views import DocumentViews
from docflow.pipeline.workflow_payload import build_workflow_payload
from docflow.rag.base import BaseRagStore, Chunk
from docflow.rag.memory_store import InMemoryRagStore
from docflow.routing.rules import RoutingDecision, evaluate_routing_rules
from docflow.telemetry.metrics import MetricsRecorder, timed
from docflow.workflow.trigger_client import WorkflowTriggerClient

FEEDBACK_RECEIVED = "Feedback received"


class DocumentService:
    """Runs the document pipeline: upload, analyze, route, feedback.

    Each operation is independent and holds no state between calls beyond
    the collaborators passed in. Nothing here retries; a failed analyze or
    route can be re-run by the caller.
    """

    def __init__(
        self,
        *,
        settings: Settings,
        repositories: Repositories,
        pdf_extractor: BasePdfExtractor,
        file_store: FileStore,
        analysis_client: BaseAnalysisClient,
        workflow_client: WorkflowTriggerClient,
        rag_store: BaseRagStore,
        metrics: MetricsRecorder,
    ) -> None:
        self._settings = settings
        self._documents = repositories.documents
        self._analyses = repositories.analyses
        self._feedback = repositories.feedback
        self._pdf_extractor = pdf_extractor
        self._file_store = file_store
        self._analysis_client = analysis_client
        self._workflow_client = workflow_client
        self._rag_store = rag_store
        self._metrics = metrics
        self.views = DocumentViews(repositories, settings)

    def upload(self, payload: UploadPayload) -> dict[str, Any]:
        """Validate, extract and store an uploaded document."""
        Log.info(f"Uploading document {payload.file_name} ({len(payload.content)} bytes)")

        # Step 1: Validate payload
        validate_payload(
            payload,
            allowed_mime_types=self._settings.allowed_mime_types,
            max_size=self._settings.document_max_size,
        )

        # Step 2: Extract text
        try:
            extracted_text = self._pdf_extractor.extract(payload.content)
        except PdfExtractionError as exc:
            raise DocumentValidationError(f"Failed to extract document text: {exc}") from exc

        # Step 3: Store file and record
        document_id = str(uuid.uuid4())
        content_path = self._file_store.save(payload.content, document_id, payload.file_name)
        document = DocumentRecord(
            id=document_id,
            title=payload.title or payload.file_name,
            description=payload.description,
            file_name=payload.file_name,
            mime_type=payload.mime_type,
            file_size=len(payload.content),
            content_path=str(content_path),
            extracted_text=extracted_text,
            status=DocumentStatus.PROCESSED,
        )
        self._documents.insert(document)

        # Step 4: Index text for history lookups
        self._rag_store.upsert_embeddings(
            document_id,
            [Chunk(text=extracted_text, metadata={"fileName": payload.file_name})],
        )
        Log.info(f"Stored document {document_id}: {len(extracted_text)} chars extracted")
        return {"id": document_id, "text": extracted_text}

    def analyze(self, document_id: str) -> dict[str, Any]:
        """Run the inference call for a document and store a new analysis."""
        Log.info(f"Analyzing document {document_id}")
        document = self._documents.find_by_id(document_id)
        if not document.extracted_text:
            raise DocumentValidationError("Document has no extracted text to analyze")

        prompt = build_analysis_prompt(
            {
                "title": document.title,
                "description": document.description,
                "extractedText": document.extracted_text,
            }
        )
        with timed() as timer:
            response = self._analysis_client.analyze(prompt, document.extracted_text)
        self._metrics.record_ai_latency(timer.duration_ms)
        Log.debug(f"AI raw response for document {document_id}:\n{response.raw_text}")

        fields = parse_analysis_result(response.body)
        feedback_required = (
            fields.confidence is None
            or fields.confidence < self._settings.feedback_confidence_threshold
        )
        analysis = AnalysisRecord(
            id=str(uuid.uuid4()),
            document_id=document_id,
            prompt=prompt,
            response=response.raw_text,
            amount=fields.amount,
            vendor=fields.vendor,
            date=fields.date,
            risk_level=fields.risk_level,
            confidence=fields.confidence,
            feedback_required=feedback_required,
        )
        self._analyses.insert(analysis)
        self._advance_status(document, DocumentStatus.ANALYZED)

        Log.info(
            f"Analyzed document {document_id}: analysis {analysis.id}, "
            f"confidence {fields.confidence}, feedback required {feedback_required}"
        )
        return {
            "analysisId": analysis.id,
            "documentId": document_id,
            **fields.to_dict(),
            "feedbackRequired": feedback_required,
        }

    def route(self, document_id: str, analysis_id: str | None = None) -> dict[str, Any]:
        """Evaluate routing rules for an analysis and start its approval workflow."""
        Log.info(f"Routing document {document_id}")
        document, analysis = self._resolve_analysis(document_id, analysis_id)
        routing_decision = self.evaluate(analysis)
        payload = build_workflow_payload(document, analysis, routing_decision, self._settings)

        try:
            result = self._workflow_client.trigger(payload)
        except PipelineError:
            self._metrics.record_workflow_outcome("failure")
            raise
        self._metrics.record_workflow_outcome("success")

        self._analyses.attach_workflow_result(analysis.id, result.instance_id, result.status)
        self._advance_status(document, DocumentStatus.ROUTED)
        Log.info(
            f"Routed document {document_id}: {routing_decision.decision.value}, "
            f"workflow instance {result.instance_id}"
        )
        return {
            "documentId": document_id,
            "analysisId": analysis.id,
            "workflowInstanceId": result.instance_id,
            "workflowStatus": result.status,
            "routingDecision": routing_decision.to_dict(),
            "workflowResponse": result.response,
        }

    def submit_feedback(
        self,
        document_id: str,
        *,
        corrections: Any,
        analysis_id: str | None = None,
        comments: str | None = None,
        submitted_by: str | None = None,
    ) -> dict[str, Any]:
        """Record a reviewer correction and clear the analysis' feedback flag."""
        if not corrections:
            raise DocumentValidationError("Corrections payload is required")

        _, analysis = self._resolve_analysis(document_id, analysis_id)
        feedback = FeedbackRecord(
            id=str(uuid.uuid4()),
            analysis_id=analysis.id,
            corrections=corrections if isinstance(corrections, str) else json.dumps(corrections),
            comments=comments,
            submitted_by=submitted_by or "anonymous",
        )
        self._feedback.insert(feedback)
        self._analyses.mark_feedback_provided(analysis.id)

        Log.info(f"Feedback {feedback.id} stored for analysis {analysis.id}")
        return {"analysisId": analysis.id, "documentId": document_id, "message": FEEDBACK_RECEIVED}

    def evaluate(self, analysis: AnalysisRecord) -> RoutingDecision:
        return evaluate_routing_rules(
            analysis,
            amount_threshold=self._settings.amount_threshold,
            high_risk_levels=self._settings.high_risk_levels,
        )

    def close(self) -> None:
        """Release the HTTP clients held by the inference and workflow adapters."""
        self._analysis_client.close()
        self._workflow_client.close()

    def _resolve_analysis(
        self,
        document_id: str,
        analysis_id: str | None,
    ) -> tuple[DocumentRecord, AnalysisRecord]:
        """Find the document and either the named analysis or its latest one."""
        document = self._documents.find_by_id(document_id)
        if analysis_id:
            analysis = self._analyses.find_by_id(analysis_id, document_id=document_id)
        else:
            analysis = self._analyses.find_latest_for_document(document_id)
        if analysis is None:
            raise NotFoundError("No analysis found for this document")
        return document, analysis

    def _advance_status(self, document: DocumentRecord, target: DocumentStatus) -> None:
        # status never moves backwards, e.g. re-analysis of a routed document
        if document.status.advances_to(target):
            self._documents.update_status(document.id, target)
            document.status = target


def build_document_service(
    settings: Settings,
    *,
    repositories: Repositories | None = None,
    metrics: MetricsRecorder | None = None,
) -> DocumentService:
    """Build a DocumentService with all adapters chosen by ``settings``."""
    return DocumentService(
        settings=settings,
        repositories=repositories or RepositoryFactory.create(settings),
        pdf_extractor=PdfExtractorFactory.create(settings),
        file_store=FileStore(Path(settings.document_storage_path)),
        analysis_client=AnalysisClientFactory.create(settings),
        workflow_client=WorkflowTriggerClient.from_settings(settings),
        rag_store=InMemoryRagStore(max_documents=settings.rag_max_documents),
        metrics=metrics or MetricsRecorder(window_size=settings.metrics_window_size),
    )
