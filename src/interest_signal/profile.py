"""Privacy-shaped views of engine state.

:class:`ExportedProfile` and :class:`MatchingExport` are what leaves the
engine.  Neither carries raw per-window counts; those only appear in the
debug view built by ``InterestSignalEngine.get_current_profile``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from interest_signal.taxonomy.models import area_of


def round1(value: float) -> float:
    return round(value, 1)


@dataclass(frozen=True)
class ExportedProfile:
    """Top tags' short-window counts, notable boosts and the overall PtA."""

    tag_counts: dict[str, float]
    intent_boosts: dict[str, float]
    pta_score: float
    geo_bucket: str
    timestamp: datetime
    commitment: str = ""

    def commitment_payload(self) -> dict[str, Any]:
        """Everything the commitment binds: the profile minus the commitment itself."""
        return {
            "tagCounts": dict(self.tag_counts),
            "intentBoosts": dict(self.intent_boosts),
            "ptaScore": self.pta_score,
            "geoBucket": self.geo_bucket,
            "timestamp": self.timestamp.isoformat(),
        }

    def to_dict(self) -> dict[str, Any]:
        payload = self.commitment_payload()
        payload["commitment"] = self.commitment
        return payload


@dataclass(frozen=True)
class InterestSummary:
    """One sector/subsector in the matching export."""

    sector: str
    score: float
    has_intent: float = 1.0

    def to_dict(self) -> dict[str, Any]:
        return {"sector": self.sector, "score": self.score, "hasIntent": self.has_intent}


@dataclass(frozen=True)
class MatchingExport:
    """Ranked sector/subsector interests for downstream matching consumers."""

    interests: list[InterestSummary] = field(default_factory=list)
    pta_score: float = 0.0
    geo_bucket: str = ""
    commitment: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "interests": [i.to_dict() for i in self.interests],
            "ptaScore": self.pta_score,
            "geoBucket": self.geo_bucket,
            "commitment": self.commitment,
        }


def summarize_interests(
    tag_counts: dict[str, float],
    intent_boosts: dict[str, float],
    top_n: int,
) -> list[InterestSummary]:
    """Sum tag counts per ``sector/subsector`` and keep the *top_n* areas.

    ``has_intent`` carries the area's recorded boost, 1.0 when none.
    """
    totals: dict[str, float] = {}
    for path, count in tag_counts.items():
        area = area_of(path)
        totals[area] = totals.get(area, 0.0) + count

    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)[:top_n]
    return [
        InterestSummary(
            sector=area,
            score=round1(score),
            has_intent=intent_boosts.get(area, 1.0),
        )
        for area, score in ranked
    ]
