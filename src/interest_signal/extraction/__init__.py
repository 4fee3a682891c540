"""Per-observation extraction: taxonomy tags, intent level, page context."""

from interest_signal.extraction.context import detect_page_context
from interest_signal.extraction.intent import (
    DEFAULT_INTENT_LABEL,
    IntentLevel,
    detect_intent,
    has_price_text,
)
from interest_signal.extraction.tags import (
    ClassifiedCategory,
    TagCandidate,
    TagClassifier,
    classify_fallback,
    extract_tags,
    rank_candidates,
)

__all__ = [
    "DEFAULT_INTENT_LABEL",
    "ClassifiedCategory",
    "IntentLevel",
    "TagCandidate",
    "TagClassifier",
    "classify_fallback",
    "detect_intent",
    "detect_page_context",
    "extract_tags",
    "has_price_text",
    "rank_candidates",
]
