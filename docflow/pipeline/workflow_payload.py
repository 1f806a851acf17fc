from typing import Any

from docflow.config.settings import Settings
from docflow.database.models import AnalysisRecord, DocumentRecord
from docflow.routing.rules import RoutingDecision


def build_workflow_payload(
    document: DocumentRecord,
    analysis: AnalysisRecord,
    routing_decision: RoutingDecision,
    settings: Settings,
) -> dict[str, Any]:
    """Build the body that starts an approval workflow instance.

    The policy block records the thresholds the decision was made under, so
    the workflow engine keeps an audit trail of why a document was routed.
    """
    return {
        "definitionId": settings.workflow_definition_id,
        "context": {
            "document": {
                "id": document.id,
                "title": document.title,
                "description": document.description,
                "fileName": document.file_name,
                "mimeType": document.mime_type,
                "fileSize": document.file_size,
            },
            "analysis": {
                "id": analysis.id,
                "amount": analysis.amount,
                "vendor": analysis.vendor,
                "date": analysis.date,
                "riskLevel": analysis.risk_level,
                "confidence": analysis.confidence,
                "feedbackRequired": analysis.feedback_required,
            },
            "routingDecision": routing_decision.to_dict(),
            "policy": {
                "amountThreshold": settings.amount_threshold,
                "highRiskLevels": list(settings.high_risk_levels),
                "feedbackConfidenceThreshold": settings.feedback_confidence_threshold,
            },
        },
    }
