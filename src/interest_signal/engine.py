"""Interest signal engine: single entry point that wires extraction, state and export.

Per observation::

    extract_tags ─┐
                  ├─> counters.update ─> pta ─> sessions.record ─> profile export
    detect_intent ┘        behavioral_score ─┘

All state mutation and every snapshot read happen under one re-entrant lock,
so a periodic sweep can never interleave with an update.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
import uuid
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from interest_signal import telemetry
from interest_signal.commitment import (
    FALLBACK_COMMITMENT,
    CommitmentScheme,
    SaltedBlake2bCommitment,
    is_fallback,
)
from interest_signal.config import EngineConfig
from interest_signal.extraction.context import detect_page_context
from interest_signal.extraction.intent import detect_intent
from interest_signal.extraction.tags import (
    CLASSIFIER_MIN_CANDIDATES,
    TagClassifier,
    classify_fallback,
    extract_tags,
    rank_candidates,
)
from interest_signal.observation import Observation
from interest_signal.profile import (
    ExportedProfile,
    MatchingExport,
    round1,
    summarize_interests,
)
from interest_signal.scoring.behavioral import behavioral_score
from interest_signal.scoring.pta import pta
from interest_signal.state.counters import SweepResult, TagCounterStore
from interest_signal.state.sessions import SessionAggregator, SessionRecord
from interest_signal.taxonomy.loader import load_taxonomy_or_empty
from interest_signal.taxonomy.store import TaxonomyStore
from interest_signal.telemetry import NoOpTelemetrySink, TelemetrySink, emit_safely

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InterestSignalEngine:
    """Owns the counter store and session aggregator for one observation stream."""

    def __init__(
        self,
        taxonomy: TaxonomyStore | None,
        config: EngineConfig | None = None,
        *,
        commitment_scheme: CommitmentScheme | None = None,
        classifier: TagClassifier | None = None,
        telemetry_sink: TelemetrySink | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.taxonomy = taxonomy if taxonomy is not None else TaxonomyStore.empty()
        self.commitment_scheme = commitment_scheme or SaltedBlake2bCommitment()
        self.classifier = classifier
        self.telemetry = telemetry_sink or NoOpTelemetrySink()
        self._clock = clock or _utc_now

        self._lock = threading.RLock()
        self.counters = TagCounterStore(self.config, lock=self._lock)
        self.sessions = SessionAggregator(
            self.config.session_capacity,
            window=self.config.session_window,
            sample_size=self.config.session_sample_size,
            lock=self._lock,
        )
        self._geo_bucket: str | None = None
        self._last_sweep = self._clock()

        if self.taxonomy.is_empty:
            logger.warning("Taxonomy is empty; tag extraction will produce no tags")
            emit_safely(self.telemetry, telemetry.TAXONOMY_EMPTY)

    @classmethod
    def from_taxonomy_file(
        cls,
        path: str | Path | None,
        config: EngineConfig | None = None,
        **kwargs: Any,
    ) -> InterestSignalEngine:
        """Build an engine from a taxonomy file; an unreadable file yields an empty taxonomy."""
        return cls(load_taxonomy_or_empty(path), config, **kwargs)

    # -- host-facing operations ------------------------------------------------

    def process_observation(self, observation: Observation | Mapping[str, Any]) -> ExportedProfile:
        """Score one page visit and return the refreshed privacy-shaped profile.

        Never raises: an unexpected failure is logged and a degraded profile
        with empty counts and the fallback commitment is returned.
        """
        now = self._clock()
        try:
            obs = Observation.from_raw(observation)
            with self._lock:
                self._maybe_sweep(now)
                record = self._score(obs, now)
                profile = self._build_profile(now)
        except Exception:
            logger.exception("Failed to process observation")
            emit_safely(self.telemetry, telemetry.OBSERVATION_FAILED)
            return self._degraded_profile(now)

        emit_safely(
            self.telemetry,
            telemetry.OBSERVATION_PROCESSED,
            tag_count=len(record.tags),
            intent=record.intent_label,
            pta_score=record.pta_score,
        )
        return profile

    def export_profile(self) -> ExportedProfile:
        """The current privacy-shaped profile without recording an observation."""
        now = self._clock()
        with self._lock:
            self._maybe_sweep(now)
            return self._build_profile(now)

    def export_for_matching(self) -> MatchingExport:
        """Top sector/subsector interests plus PtA, geo bucket and commitment."""
        profile = self.export_profile()
        interests = summarize_interests(
            profile.tag_counts, profile.intent_boosts, self.config.matching_top_n,
        )
        return MatchingExport(
            interests=interests,
            pta_score=profile.pta_score,
            geo_bucket=profile.geo_bucket,
            commitment=profile.commitment,
        )

    def get_current_profile(self) -> dict[str, Any]:
        """Debug view with raw per-window counts.  Not for export."""
        now = self._clock()
        with self._lock:
            windows = self.counters.window_counts(now)
            boosts = self.counters.intent_boosts(now)
            return {
                "view": "debug",
                "tagCounts": {
                    path: {name: round1(value) for name, value in counts.items()}
                    for path, counts in sorted(windows.items())
                },
                "intentBoosts": {area: round(v, 2) for area, v in sorted(boosts.items())},
                "sessionCount": len(self.sessions),
                "overallPta": self.sessions.overall_pta(now),
                "pageContexts": self.sessions.context_counts(),
                "geoBucket": self._geo_bucket,
                "lastSweep": self._last_sweep.isoformat(),
                "taxonomy": {
                    "sectors": len(self.taxonomy.sectors()),
                    "leaves": len(self.taxonomy),
                    "intentLabels": list(self.taxonomy.intent_labels()),
                },
            }

    def run_decay(self, now: datetime | None = None) -> SweepResult:
        """Decay every counter and boost to *now* and prune faded entries."""
        now = now or self._clock()
        with self._lock:
            result = self.counters.decay_all(now)
            self._last_sweep = now
        emit_safely(
            self.telemetry,
            telemetry.COUNTERS_SWEPT,
            removed_tags=len(result.removed_tags),
            removed_boosts=len(result.removed_boosts),
            remaining_tags=result.remaining_tags,
        )
        return result

    def set_geo_bucket(self, bucket: str | None) -> None:
        """Store a host-supplied, pre-quantized location bucket verbatim."""
        if bucket is not None and not isinstance(bucket, str):
            logger.warning("Ignoring non-string geo bucket: %r", bucket)
            return
        with self._lock:
            self._geo_bucket = bucket or None

    @property
    def geo_bucket(self) -> str:
        return self._geo_bucket or self.config.default_geo_bucket

    # -- internals ---------------------------------------------------------------

    def _maybe_sweep(self, now: datetime) -> None:
        if now - self._last_sweep >= self.config.sweep_interval:
            self.run_decay(now)

    def _score(self, obs: Observation, now: datetime) -> SessionRecord:
        candidates = extract_tags(
            self.taxonomy, obs.url, obs.title, obs.content, obs.meta.description,
        )
        if self.classifier is not None and len(candidates) < CLASSIFIER_MIN_CANDIDATES:
            known = {c.path for c in candidates}
            candidates += [
                c for c in classify_fallback(self.classifier, obs.content)
                if c.path not in known
            ]
        candidates = rank_candidates(candidates)

        intent = detect_intent(
            self.taxonomy.intent_signals(),
            obs.url,
            obs.dom_signals.matched_selectors,
            obs.content,
        )
        self.counters.update(candidates, intent.boost, now)

        engagement = behavioral_score(
            obs.time_on_page,
            obs.scroll_depth,
            obs.interaction_count,
            obs.timestamp,
            now,
            half_life_hours=self.config.recency_half_life_hours,
        )
        score = pta(self.counters, candidates, intent, engagement)

        record = SessionRecord(
            tags=tuple(c.path for c in candidates),
            intent_label=intent.label,
            intent_boost=intent.boost,
            behavioral_score=engagement,
            pta_score=score,
            timestamp=now,
            page_context=detect_page_context(obs.text_blob()),
        )
        session_id = obs.session_id or f"anon-{uuid.uuid4().hex[:12]}"
        self.sessions.record(session_id, record)
        logger.debug(
            "Scored observation: %d tags, intent=%s, behavioral=%.3f, pta=%.2f",
            len(candidates), intent.label, engagement, score,
        )
        return record

    def _build_profile(self, now: datetime) -> ExportedProfile:
        cfg = self.config
        tag_counts = {
            path: round1(count)
            for path, count in self.counters.read_top(cfg.export_top_n, now)
            if count > cfg.export_min_count
        }
        intent_boosts = {
            area: round1(value)
            for area, value in sorted(self.counters.intent_boosts(now).items())
            if value > cfg.notable_boost
        }
        profile = ExportedProfile(
            tag_counts=tag_counts,
            intent_boosts=intent_boosts,
            pta_score=self.sessions.overall_pta(now),
            geo_bucket=self.geo_bucket,
            timestamp=now,
        )
        return dataclasses.replace(profile, commitment=self._commit(profile))

    def _commit(self, profile: ExportedProfile) -> str:
        try:
            digest = self.commitment_scheme.commit(profile.commitment_payload())
        except Exception:
            logger.exception("Commitment scheme failed, using fallback digest")
            digest = FALLBACK_COMMITMENT
        if is_fallback(digest):
            emit_safely(self.telemetry, telemetry.COMMITMENT_FALLBACK)
        return digest

    def _degraded_profile(self, now: datetime) -> ExportedProfile:
        return ExportedProfile(
            tag_counts={},
            intent_boosts={},
            pta_score=0.0,
            geo_bucket=self.geo_bucket,
            timestamp=now,
            commitment=FALLBACK_COMMITMENT,
        )
