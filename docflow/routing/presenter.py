"""Maps a routing verdict to the label shown to reviewers.

Rules are evaluated top to bottom and the first match wins, so a high-risk
document is labelled for rejection even when its amount also exceeds the
finance threshold.
"""

from collections.abc import Callable
from dataclasses import dataclass

from docflow.routing.rules import Decision, RoutingDecision

PENDING_DESCRIPTION = "Awaiting analysis results."


@dataclass(frozen=True)
class DecisionOutcome:
    label: str
    tone: str
    description: str

    def to_dict(self) -> dict[str, str]:
        return {"label": self.label, "tone": self.tone, "description": self.description}


OutcomeRule = tuple[Callable[[RoutingDecision], bool], str, str]

OUTCOME_RULES: tuple[OutcomeRule, ...] = (
    (lambda d: d.decision is Decision.AUTO_APPROVE, "Auto-Approve", "success"),
    (lambda d: d.high_risk, "Reject / Manual Review", "danger"),
    (lambda d: d.amount_exceeds_threshold, "Finance Approval", "warning"),
    (lambda d: True, "Manager Approval", "info"),
)


def derive_decision_outcome(routing_decision: RoutingDecision | None) -> DecisionOutcome:
    if routing_decision is None:
        return DecisionOutcome(label="Pending Decision", tone="info", description=PENDING_DESCRIPTION)
    for matches, label, tone in OUTCOME_RULES:
        if matches(routing_decision):
            return DecisionOutcome(label=label, tone=tone, description=routing_decision.reason)
    raise AssertionError("outcome rules must end with a catch-all")
