"""Read-only summaries combining documents, analyses and decision outcomes."""

from typing import Any

from docflow.config.settings import Settings
from docflow.database.factory import Repositories
from docflow.database.models import AnalysisRecord
from docflow.routing.presenter import derive_decision_outcome
from docflow.routing.rules import RoutingDecision, evaluate_routing_rules


class DocumentViews:
    def __init__(self, repositories: Repositories, settings: Settings) -> None:
        self._documents = repositories.documents
        self._analyses = repositories.analyses
        self._feedback = repositories.feedback
        self._settings = settings

    def list_documents(self) -> list[dict[str, Any]]:
        documents = self._documents.list_recent()
        latest: dict[str, AnalysisRecord] = {}
        for analysis in self._analyses.list_for_documents(doc.id for doc in documents):
            latest.setdefault(analysis.document_id, analysis)
        return [
            {**document.summary(), **self._decision_block(latest.get(document.id))}
            for document in documents
        ]

    def get_document(self, document_id: str) -> dict[str, Any]:
        document = self._documents.find_by_id(document_id)
        analyses = self._analyses.list_for_documents([document_id])
        feedback_by_analysis: dict[str, list[dict[str, Any]]] = {}
        for feedback in self._feedback.list_for_analyses(a.id for a in analyses):
            feedback_by_analysis.setdefault(feedback.analysis_id, []).append(feedback.summary())

        return {
            **document.summary(),
            "extractedText": document.extracted_text,
            "analyses": [
                {**analysis.summary(), "feedback": feedback_by_analysis.get(analysis.id, [])}
                for analysis in analyses
            ],
            **self._decision_block(analyses[0] if analyses else None),
        }

    def workflow_statuses(self) -> list[dict[str, Any]]:
        analyses = self._analyses.list_with_workflow()
        documents = {
            doc.id: doc
            for doc in self._documents.list_by_ids({a.document_id for a in analyses})
        }
        rows = []
        for analysis in analyses:
            document = documents.get(analysis.document_id)
            routing_decision = self._evaluate(analysis)
            rows.append(
                {
                    "documentId": analysis.document_id,
                    "title": document.title if document else None,
                    "documentStatus": document.status.value if document else None,
                    "analysisId": analysis.id,
                    "workflowInstanceId": analysis.workflow_instance_id,
                    "workflowStatus": analysis.workflow_status,
                    "routingDecision": routing_decision.to_dict(),
                    "decisionOutcome": derive_decision_outcome(routing_decision).to_dict(),
                }
            )
        return rows

    def _decision_block(self, analysis: AnalysisRecord | None) -> dict[str, Any]:
        routing_decision = self._evaluate(analysis) if analysis else None
        return {
            "latestAnalysis": analysis.summary() if analysis else None,
            "routingDecision": routing_decision.to_dict() if routing_decision else None,
            "decisionOutcome": derive_decision_outcome(routing_decision).to_dict(),
        }

    def _evaluate(self, analysis: AnalysisRecord) -> RoutingDecision:
        return evaluate_routing_rules(
            analysis,
            amount_threshold=self._settings.amount_threshold,
            high_risk_levels=self._settings.high_risk_levels,
        )
