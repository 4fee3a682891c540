"""Best-effort coercion of host-supplied observation fields.

Hosts send whatever their page collector produced: numbers as strings,
``None`` for missing metrics, NaN from a failed division.  These helpers
turn such values into usable numbers or ``None`` and never raise.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any

# Epoch values above this are treated as milliseconds (year ~2286 in seconds).
_EPOCH_MS_THRESHOLD = 10_000_000_000


def clean_numeric_string(raw: str) -> str:
    """Keep only digits, ``'.'``, and ``'-'``."""
    return "".join(c for c in raw if c.isdigit() or c in {".", "-"})


def parse_metric(value: Any) -> float | None:
    """Parse an engagement metric.  Returns ``None`` for unparseable or non-finite input."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        stripped = value.strip()
        try:
            number = float(stripped)
        except ValueError:
            # Unit suffixes and separators ("120s", "1,234"): keep digits only.
            cleaned = clean_numeric_string(stripped)
            if not cleaned:
                return None
            try:
                number = float(cleaned)
            except ValueError:
                return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def non_negative(value: Any, default: float = 0.0) -> float:
    """Parse *value* as a metric, substituting *default* for bad or negative input."""
    number = parse_metric(value)
    if number is None or number < 0:
        return default
    return number


def finite_or(value: Any, default: float) -> float:
    """Return *value* as a float if it is a finite real number, else *default*."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    number = float(value)
    return number if math.isfinite(number) else default


def parse_timestamp(value: Any) -> datetime | None:
    """Accept a datetime, ISO-8601 string, or epoch seconds / milliseconds.

    Naive datetimes are assumed to be UTC.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        if not math.isfinite(value) or value < 0:
            return None
        seconds = value / 1000 if value > _EPOCH_MS_THRESHOLD else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        try:
            parsed = datetime.fromisoformat(stripped.replace("Z", "+00:00"))
        except ValueError:
            number = parse_metric(stripped)
            return parse_timestamp(number) if number is not None else None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None
