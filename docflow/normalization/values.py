"""Coercion of loosely-typed AI output and form fields into typed values.

None of these functions raise: anything that cannot be coerced becomes ``None``.
"""

import math
import re
from datetime import date, datetime, timezone
from decimal import Decimal

_WHITESPACE = re.compile(r"\s+")

_FALLBACK_DATE_FORMATS = (
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
)


def normalize_number(value: object) -> float | None:
    """Return ``value`` as a finite float, or None when missing or non-numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        cleaned = value.strip()
        # float() accepts "1_000"; reject digit separators
        if not cleaned or "_" in cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def normalize_date(value: object) -> str | None:
    """Parse ``value`` and return its calendar date as ``YYYY-MM-DD``.

    Time of day is dropped. Offset-aware timestamps are converted to UTC
    first, so ``2024-03-01T23:30:00-05:00`` becomes ``2024-03-02``.
    """
    if not value or isinstance(value, bool):
        return None
    parsed = _parse_datetime(value)
    if parsed is None:
        return None
    if isinstance(parsed, datetime):
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc)
        parsed = parsed.date()
    return parsed.isoformat()


def normalize_text(text: str | None) -> str:
    """Collapse whitespace runs to single spaces and trim the ends."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


def _parse_datetime(value: object) -> date | datetime | None:
    if isinstance(value, (datetime, date)):
        return value
    if isinstance(value, (int, float)):
        # epoch milliseconds, as emitted by JavaScript clients
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str):
        return None

    cleaned = value.strip()
    if not cleaned:
        return None
    iso_candidate = cleaned[:-1] + "+00:00" if cleaned.endswith(("Z", "z")) else cleaned
    try:
        return datetime.fromisoformat(iso_candidate)
    except ValueError:
        pass
    for fmt in _FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt)
        except ValueError:
            continue
    return None
