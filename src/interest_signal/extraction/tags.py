"""Tag extraction: match one observation against the taxonomy leaves.

Scoring per leaf:

- +0.3 for every distinct pattern found in the text blob
- +0.2 for every keyword found in the text blob
- +0.5 when the observation's hostname is one of the leaf's domains

A leaf below the minimum evidence of 0.3 is ignored.  Otherwise its
candidate score is ``min(raw * leaf.weight, 1.0)``.  These weights are
policy, not configuration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import NamedTuple, Protocol, runtime_checkable

from interest_signal.observation import hostname_of
from interest_signal.parsing import finite_or
from interest_signal.taxonomy.store import TaxonomyStore

logger = logging.getLogger(__name__)

PATTERN_EVIDENCE = 0.3
KEYWORD_EVIDENCE = 0.2
DOMAIN_EVIDENCE = 0.5
MIN_EVIDENCE = 0.3

# Below this many taxonomy candidates the optional classifier is consulted.
CLASSIFIER_MIN_CANDIDATES = 3
CLASSIFIER_DEFAULT_CONFIDENCE = 0.5


@dataclass(frozen=True)
class TagCandidate:
    """A taxonomy leaf matched by one observation."""

    path: str
    score: float
    weight: float


class ClassifiedCategory(NamedTuple):
    category: str
    confidence: float | None = None


@runtime_checkable
class TagClassifier(Protocol):
    """Optional local text classifier for pages the taxonomy barely covers."""

    def classify(self, text: str) -> list[ClassifiedCategory]: ...


def build_text_blob(title: str, content: str, meta_description: str) -> str:
    return f"{title or ''} {content or ''} {meta_description or ''}".lower()


def extract_tags(
    taxonomy: TaxonomyStore | None,
    url: str,
    title: str,
    content: str,
    meta_description: str = "",
) -> list[TagCandidate]:
    """Return every leaf whose evidence reaches :data:`MIN_EVIDENCE`.

    An empty or missing taxonomy yields ``[]``; the caller is responsible for
    reporting that the taxonomy failed to load.
    """
    if taxonomy is None or taxonomy.is_empty:
        return []

    text = build_text_blob(title, content, meta_description)
    domain = hostname_of(url)

    candidates: list[TagCandidate] = []
    for leaf in taxonomy.leaves():
        raw = 0.0
        for pattern in leaf.patterns:
            if pattern in text:
                raw += PATTERN_EVIDENCE
        for keyword in leaf.keywords:
            if keyword in text:
                raw += KEYWORD_EVIDENCE
        if domain and domain in leaf.domains:
            raw += DOMAIN_EVIDENCE

        # Rounded so that a lone pattern (0.3) is not lost to float error.
        if round(raw, 9) < MIN_EVIDENCE:
            continue
        candidates.append(
            TagCandidate(
                path=leaf.key.path,
                score=min(raw * leaf.weight, 1.0),
                weight=leaf.weight,
            )
        )
    return candidates


def classify_fallback(classifier: TagClassifier, text: str) -> list[TagCandidate]:
    """Turn classifier output into ``general/<category>/browse`` candidates.

    Classifier errors are logged and produce no candidates.
    """
    try:
        results = classifier.classify(text)
    except Exception:
        logger.exception("Fallback text classification failed, skipping")
        return []

    candidates: list[TagCandidate] = []
    for result in results or []:
        try:
            item = ClassifiedCategory(*result)
        except TypeError:
            logger.warning("Ignoring malformed classifier result: %r", result)
            continue
        category = str(item.category).strip().lower().replace("/", "_")
        if not category:
            continue
        confidence = finite_or(item.confidence, -1.0)
        if not 0.0 <= confidence <= 1.0:
            confidence = CLASSIFIER_DEFAULT_CONFIDENCE
        candidates.append(
            TagCandidate(path=f"general/{category}/browse", score=confidence, weight=1.0),
        )
    return candidates


def rank_candidates(candidates: list[TagCandidate]) -> list[TagCandidate]:
    """Highest score first; ties keep extraction order."""
    return sorted(candidates, key=lambda c: c.score, reverse=True)
