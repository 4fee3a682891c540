"""Purchase-funnel stage detection: pure logic, no I/O.

Each configured intent label counts matches over URL substrings, caller
supplied DOM selector hits and content substrings.  Currency-like price
text adds half a match to every label that accepts price evidence.  Among
labels with any match the one with the highest boost wins; match counts
never break the tie in favor of a weaker label.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from interest_signal.taxonomy.models import IntentSignalSpec

DEFAULT_INTENT_LABEL = "research_phase"
NEUTRAL_BOOST = 1.0
PRICE_MATCH_BONUS = 0.5

PRICE_PATTERN = re.compile(
    r"\$\d+(?:\.\d{2})?|\d+(?:\.\d{2})?\s*(?:USD|EUR|GBP)",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class IntentLevel:
    """Detected funnel stage and the multiplier it applies to tag activity."""

    label: str = DEFAULT_INTENT_LABEL
    boost: float = NEUTRAL_BOOST
    matches: float = 0.0

    @property
    def is_default(self) -> bool:
        return self.label == DEFAULT_INTENT_LABEL and self.boost == NEUTRAL_BOOST


def has_price_text(content: str) -> bool:
    return bool(content) and PRICE_PATTERN.search(content) is not None


def count_matches(
    spec: IntentSignalSpec,
    url_lower: str,
    selectors: frozenset[str],
    content_lower: str,
    price_seen: bool,
) -> float:
    matches = 0.0
    matches += sum(1 for p in spec.url_patterns if p in url_lower)
    matches += sum(1 for s in spec.dom_selectors if s in selectors)
    matches += sum(1 for p in spec.content_patterns if p in content_lower)
    if price_seen and spec.price_evidence:
        matches += PRICE_MATCH_BONUS
    return matches


def detect_intent(
    intent_signals: Iterable[IntentSignalSpec],
    url: str,
    matched_selectors: Iterable[str] | None,
    content: str,
) -> IntentLevel:
    """Return the highest-boost label with at least one match.

    Missing URL or content, or no matching label, yields the neutral
    ``research_phase`` level.
    """
    if not url or not content:
        return IntentLevel()

    url_lower = url.lower()
    content_lower = content.lower()
    selectors = frozenset(matched_selectors or ())
    price_seen = has_price_text(content)

    best = IntentLevel()
    for spec in intent_signals:
        matches = count_matches(spec, url_lower, selectors, content_lower, price_seen)
        if matches > 0 and spec.boost > best.boost:
            best = IntentLevel(label=spec.label, boost=spec.boost, matches=matches)
    return best
