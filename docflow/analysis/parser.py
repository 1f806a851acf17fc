"""Turns whatever the inference service returned into ``ExtractedFields``.

Providers put the model output in different places. ``CANDIDATE_EXTRACTORS``
is tried in order and the first present value wins:

1. ``result``
2. ``output``
3. ``choices[0].message.content``
4. ``generated_text``
5. ``completion``
6. ``content``
7. the whole body
"""

import json
from collections.abc import Callable
from typing import Any

from docflow.analysis.models import ExtractedFields
from docflow.logging.logger import Log
from docflow.normalization.values import normalize_date, normalize_number


def _key(name: str) -> Callable[[Any], Any]:
    def extract(body: Any) -> Any:
        return body.get(name) if isinstance(body, dict) else None

    extract.__name__ = f"extract_{name}"
    return extract


def _first_choice_content(body: Any) -> Any:
    if not isinstance(body, dict):
        return None
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    return message.get("content") if isinstance(message, dict) else None


def _whole_body(body: Any) -> Any:
    return body


CANDIDATE_EXTRACTORS: tuple[Callable[[Any], Any], ...] = (
    _key("result"),
    _key("output"),
    _first_choice_content,
    _key("generated_text"),
    _key("completion"),
    _key("content"),
    _whole_body,
)


def find_candidate(body: Any) -> Any:
    """Return the first present value produced by ``CANDIDATE_EXTRACTORS``."""
    for extractor in CANDIDATE_EXTRACTORS:
        candidate = extractor(body)
        if _is_present(candidate):
            return candidate
    return None


def parse_analysis_result(body: Any) -> ExtractedFields:
    """Normalize an inference response body into extracted invoice fields.

    Never raises: unparseable model output yields all-None fields.
    """
    candidate = find_candidate(body)
    structured: dict[str, Any] = {}
    if isinstance(candidate, str):
        structured = _loads_object(candidate)
    elif isinstance(candidate, dict):
        structured = candidate

    return ExtractedFields(
        amount=normalize_number(structured.get("amount")),
        vendor=_text(structured.get("vendor") or structured.get("supplier")),
        date=normalize_date(structured.get("date") or structured.get("invoiceDate")),
        risk_level=_text(structured.get("riskLevel") or structured.get("risk")),
        confidence=normalize_number(structured.get("confidence")),
    )


def _is_present(value: Any) -> bool:
    if value is None or value is False or value == "":
        return False
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value == 0:
        return False
    return True


def _text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return value if isinstance(value, str) else str(value)


def _loads_object(raw: str) -> dict[str, Any]:
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        lines = cleaned.splitlines()[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        cleaned = "\n".join(lines)
    try:
        parsed = json.loads(cleaned)
    except ValueError:
        Log.warning("Analysis response is not valid JSON, using empty result")
        return {}
    return parsed if isinstance(parsed, dict) else {}
