"""Behavioral engagement score: dwell time, scroll depth, interactions, recency.

Each input is divided by a fixed cap and clamped to [0, 1].  Cap-based
normalization keeps the score interpretable for a single visit without
reference to any other visit.
"""

from __future__ import annotations

import math
from datetime import datetime

from interest_signal.parsing import finite_or

TIME_CAP_SECONDS = 300.0
SCROLL_CAP_PERCENT = 100.0
INTERACTION_CAP = 20.0

TIME_WEIGHT = 0.4
SCROLL_WEIGHT = 0.3
INTERACTION_WEIGHT = 0.3

DEFAULT_RECENCY_HOURS = 24.0


def _clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, value))


def recency_factor(
    observed_at: datetime | None,
    now: datetime,
    half_life_hours: float = DEFAULT_RECENCY_HOURS,
) -> float:
    """``exp(-hours_ago / half_life_hours)``; 1.0 for unknown or future times."""
    if observed_at is None:
        return 1.0
    hours_ago = (now - observed_at).total_seconds() / 3600
    if hours_ago <= 0:
        return 1.0
    return _clamp(math.exp(-hours_ago / half_life_hours))


def behavioral_score(
    time_on_page_seconds: float,
    scroll_depth_percent: float,
    interaction_count: float,
    observed_at: datetime | None,
    now: datetime,
    *,
    half_life_hours: float = DEFAULT_RECENCY_HOURS,
) -> float:
    """Weighted engagement in [0, 1], discounted by observation age."""
    time_part = _clamp(finite_or(time_on_page_seconds, 0.0) / TIME_CAP_SECONDS)
    scroll_part = _clamp(finite_or(scroll_depth_percent, 0.0) / SCROLL_CAP_PERCENT)
    interaction_part = _clamp(finite_or(interaction_count, 0.0) / INTERACTION_CAP)

    weighted = (
        time_part * TIME_WEIGHT
        + scroll_part * SCROLL_WEIGHT
        + interaction_part * INTERACTION_WEIGHT
    )
    return _clamp(weighted * recency_factor(observed_at, now, half_life_hours))
