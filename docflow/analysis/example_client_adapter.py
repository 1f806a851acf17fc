"""Offline inference client for local development and demos."""

import json
from typing import ClassVar

from docflow.analysis.client_base import BaseAnalysisClient
from docflow.analysis.models import AnalysisResponse


class ExampleAnalysisClient(BaseAnalysisClient):
    """Returns a fixed, valid extraction without any network call."""

    DEFAULT_RESULT: ClassVar[dict[str, object]] = {
        "amount": 1250.0,
        "vendor": "Example Supplies Ltd",
        "date": "2024-01-15",
        "riskLevel": "low",
        "confidence": 0.95,
    }

    def analyze(self, prompt: str, extracted_text: str) -> AnalysisResponse:
        _ = prompt, extracted_text
        body = {"result": dict(self.DEFAULT_RESULT)}
        return AnalysisResponse(raw_text=json.dumps(body), body=body)
