from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class AnalysisResponse:
    """What the inference service sent back: the raw text and its parsed body."""

    raw_text: str
    body: Any = field(default_factory=dict)


@dataclass(frozen=True)
class ExtractedFields:
    """Normalized invoice facts pulled out of an inference response."""

    amount: float | None = None
    vendor: str | None = None
    date: str | None = None
    risk_level: str | None = None
    confidence: float | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "amount": self.amount,
            "vendor": self.vendor,
            "date": self.date,
            "riskLevel": self.risk_level,
            "confidence": self.confidence,
        }
