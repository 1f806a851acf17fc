import json
from typing import Any

import httpx


def parse_body_text(text: str) -> Any:
    """Speculatively decode a response body.

    Empty bodies become ``{}``; anything that is not valid JSON is kept
    verbatim under ``raw`` instead of failing the call.
    """
    if not text:
        return {}
    try:
        return json.loads(text)
    except ValueError:
        return {"raw": text}


def read_response_body(response: httpx.Response) -> tuple[str, Any]:
    """Return the raw text of ``response`` and its best-effort parsed body."""
    text = response.text
    return text, parse_body_text(text)


def error_message(body: Any, fallback: str) -> str:
    """Pick a human-readable message out of an upstream error body."""
    if isinstance(body, dict):
        for key in ("error", "message", "error_description"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
            if isinstance(value, dict):
                nested = value.get("message")
                if isinstance(nested, str) and nested:
                    return nested
    return fallback
