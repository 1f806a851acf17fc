import uuid
from datetime import timedelta
from typing import Any

import pytest

from docflow.database.models import (
    AnalysisRecord,
    DocumentRecord,
    DocumentStatus,
    FeedbackRecord,
    utcnow,
)
from docflow.database.repositories.analysis_repository import PostgresAnalysisRepository
from docflow.database.repositories.document_repository import PostgresDocumentRepository
from docflow.database.repositories.feedback_repository import PostgresFeedbackRepository
from docflow.exceptions import NotFoundError


def _new_id() -> str:
    return str(uuid.uuid4())


@pytest.fixture
def seed_document(integration_cleanup: list[str]) -> DocumentRecord:
    document = DocumentRecord(
        id=_new_id(),
        title="Invoice 123",
        file_name="invoice.pdf",
        mime_type="application/pdf",
        file_size=1024,
        extracted_text="Invoice 123 from Acme Corp",
        status=DocumentStatus.PROCESSED,
    )
    PostgresDocumentRepository().insert(document)
    integration_cleanup.append(document.id)
    return document


def _analysis(document_id: str, offset_seconds: int = 0, **overrides: Any) -> AnalysisRecord:
    return AnalysisRecord(
        id=_new_id(),
        document_id=document_id,
        prompt="prompt",
        response='{"result": {}}',
        created_at=utcnow() + timedelta(seconds=offset_seconds),
        **overrides,
    )


class TestPostgresDocumentRepository:
    def test_insert_and_find(self, seed_document: DocumentRecord) -> None:
        found = PostgresDocumentRepository().find_by_id(seed_document.id)

        assert found.title == "Invoice 123"
        assert found.extracted_text == "Invoice 123 from Acme Corp"
        assert found.status is DocumentStatus.PROCESSED
        assert found.updated_at is None

    def test_find_missing_raises(self, integration_pool: None) -> None:
        with pytest.raises(NotFoundError):
            PostgresDocumentRepository().find_by_id(_new_id())

    def test_update_status(self, seed_document: DocumentRecord) -> None:
        repo = PostgresDocumentRepository()

        repo.update_status(seed_document.id, DocumentStatus.ANALYZED)

        found = repo.find_by_id(seed_document.id)
        assert found.status is DocumentStatus.ANALYZED
        assert found.updated_at is not None

    def test_update_status_missing_raises(self, integration_pool: None) -> None:
        with pytest.raises(NotFoundError):
            PostgresDocumentRepository().update_status(_new_id(), DocumentStatus.ROUTED)

    def test_list_by_ids(self, seed_document: DocumentRecord) -> None:
        found = PostgresDocumentRepository().list_by_ids([seed_document.id, _new_id()])
        assert [d.id for d in found] == [seed_document.id]
        assert PostgresDocumentRepository().list_by_ids([]) == []


class TestPostgresAnalysisRepository:
    def test_latest_and_scoped_lookup(self, seed_document: DocumentRecord) -> None:
        repo = PostgresAnalysisRepository()
        older = _analysis(seed_document.id, offset_seconds=-10, amount=1200.5, risk_level="High")
        newer = _analysis(seed_document.id, confidence=0.91)
        repo.insert(older)
        repo.insert(newer)

        latest = repo.find_latest_for_document(seed_document.id)
        assert latest is not None
        assert latest.id == newer.id
        assert [a.id for a in repo.list_for_documents([seed_document.id])] == [newer.id, older.id]

        found = repo.find_by_id(older.id, document_id=seed_document.id)
        assert found is not None
        assert found.amount == 1200.5
        assert found.risk_level == "High"
        assert repo.find_by_id(older.id, document_id=_new_id()) is None

    def test_feedback_flag_and_workflow_result(self, seed_document: DocumentRecord) -> None:
        repo = PostgresAnalysisRepository()
        analysis = _analysis(seed_document.id)
        repo.insert(analysis)

        repo.mark_feedback_provided(analysis.id)
        repo.attach_workflow_result(analysis.id, "wf-1", "RUNNING")

        found = repo.find_by_id(analysis.id)
        assert found is not None
        assert found.feedback_provided is True
        assert found.feedback_required is False
        assert found.workflow_instance_id == "wf-1"
        assert found.workflow_status == "RUNNING"
        assert analysis.id in {a.id for a in repo.list_with_workflow()}

    def test_updates_on_missing_analysis_raise(self, integration_pool: None) -> None:
        with pytest.raises(NotFoundError):
            PostgresAnalysisRepository().mark_feedback_provided(_new_id())


class TestPostgresFeedbackRepository:
    def test_insert_and_list(self, seed_document: DocumentRecord) -> None:
        analysis = _analysis(seed_document.id)
        PostgresAnalysisRepository().insert(analysis)
        repo = PostgresFeedbackRepository()
        feedback = FeedbackRecord(
            id=_new_id(),
            analysis_id=analysis.id,
            corrections='{"amount": 12.5}',
            comments="misread total",
            submitted_by="reviewer-1",
        )

        repo.insert(feedback)

        (found,) = repo.list_for_analyses([analysis.id])
        assert found.corrections == '{"amount": 12.5}'
        assert found.submitted_by == "reviewer-1"
