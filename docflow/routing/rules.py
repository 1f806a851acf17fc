from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from docflow.normalization.values import normalize_number

WITHIN_THRESHOLDS_REASON = "Within automatic approval thresholds"


class Decision(str, Enum):
    AUTO_APPROVE = "AUTO_APPROVE"
    REQUIRES_REVIEW = "REQUIRES_REVIEW"


@dataclass(frozen=True)
class RoutingDecision:
    """Verdict for one analysis under a given pair of thresholds."""

    decision: Decision
    amount_exceeds_threshold: bool
    high_risk: bool
    reason: str
    amount: float | None = None
    risk_level: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "decision": self.decision.value,
            "amountExceedsThreshold": self.amount_exceeds_threshold,
            "highRisk": self.high_risk,
            "reason": self.reason,
            "amount": self.amount,
            "riskLevel": self.risk_level,
        }


def evaluate_routing_rules(
    analysis: Any,
    amount_threshold: float,
    high_risk_levels: Iterable[str],
) -> RoutingDecision:
    """Decide whether an analysis can be auto-approved.

    ``analysis`` is a mapping with ``amount``/``riskLevel`` keys or any object
    with ``amount``/``risk_level`` attributes. Pure: same input, same output.
    """
    amount = normalize_number(_field(analysis, "amount", "amount"))
    amount_exceeds = amount is not None and amount > amount_threshold

    raw_risk = _field(analysis, "riskLevel", "risk_level")
    risk_level = str(raw_risk).lower() if raw_risk else ""
    risk_set = {level.lower() for level in high_risk_levels}
    high_risk = bool(risk_level) and risk_level in risk_set

    reasons = []
    if amount_exceeds:
        reasons.append(
            f"Amount {format_number(amount)} is greater than {format_number(amount_threshold)}"
        )
    if high_risk:
        reasons.append(f"Risk level {risk_level} requires review")

    return RoutingDecision(
        decision=Decision.REQUIRES_REVIEW if reasons else Decision.AUTO_APPROVE,
        amount_exceeds_threshold=amount_exceeds,
        high_risk=high_risk,
        reason=" and ".join(reasons) if reasons else WITHIN_THRESHOLDS_REASON,
        amount=amount,
        risk_level=risk_level or None,
    )


def format_number(value: float | None) -> str:
    """Render whole floats without a trailing ``.0`` (``20000.0`` -> ``20000``)."""
    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _field(analysis: Any, mapping_key: str, attribute: str) -> Any:
    if analysis is None:
        return None
    if isinstance(analysis, dict):
        return analysis.get(mapping_key, analysis.get(attribute))
    return getattr(analysis, attribute, None)
