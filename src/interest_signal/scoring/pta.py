"""Probability-to-Act: logistic squash of tag activity, engagement and intent.

    z   = 0.8 * ln(max(tag_signal, 1)) + 0.5 * behavioral + 0.3 * ln(boost)
    PtA = round(1 / (1 + e^-z), 2)

Missing or invalid inputs are replaced by their neutral values before the
formula runs: tag_signal 0, behavioral 0, boost 1.0.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import TYPE_CHECKING

from interest_signal.parsing import finite_or

if TYPE_CHECKING:
    from interest_signal.extraction.intent import IntentLevel
    from interest_signal.extraction.tags import TagCandidate
    from interest_signal.state.counters import TagCounterStore

TAG_COEFFICIENT = 0.8
BEHAVIORAL_COEFFICIENT = 0.5
INTENT_COEFFICIENT = 0.3


def _logistic(z: float) -> float:
    if z >= 0:
        return 1.0 / (1.0 + math.exp(-z))
    ez = math.exp(z)
    return ez / (1.0 + ez)


def strongest_signal(values: Iterable[float]) -> float:
    """Largest finite, non-negative value; 0 when there is none."""
    best = 0.0
    for value in values:
        v = finite_or(value, 0.0)
        if v > best:
            best = v
    return best


def probability_to_act(tag_signal: float, behavioral: float, intent_boost: float) -> float:
    """Bounded PtA in [0, 1], rounded to two decimals."""
    signal = max(finite_or(tag_signal, 0.0), 0.0)
    engagement = min(max(finite_or(behavioral, 0.0), 0.0), 1.0)
    boost = finite_or(intent_boost, 1.0)
    if boost < 1.0:
        boost = 1.0

    z = (
        TAG_COEFFICIENT * math.log(max(signal, 1.0))
        + BEHAVIORAL_COEFFICIENT * engagement
        + INTENT_COEFFICIENT * math.log(boost)
    )
    return min(max(round(_logistic(z), 2), 0.0), 1.0)


def pta(
    counters: TagCounterStore,
    candidates: Iterable[TagCandidate] | None,
    intent: IntentLevel | None,
    behavioral: float,
) -> float:
    """PtA for one observation after its tags were folded into *counters*."""
    paths = [c.path for c in candidates or ()]
    tag_signal = strongest_signal(counters.short_window_counts(paths).values())
    boost = intent.boost if intent is not None else 1.0
    return probability_to_act(tag_signal, behavioral, boost)
