"""Session aggregator: bounded store of recent per-observation results."""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta

DEFAULT_CAPACITY = 100
DEFAULT_WINDOW = timedelta(hours=24)
DEFAULT_SAMPLE_SIZE = 10


@dataclass(frozen=True)
class SessionRecord:
    """Scores produced for the latest observation of one session."""

    tags: tuple[str, ...]
    intent_label: str
    intent_boost: float
    behavioral_score: float
    pta_score: float
    timestamp: datetime
    page_context: frozenset[str] = field(default_factory=frozenset)


class SessionAggregator:
    """Keeps at most *capacity* sessions, evicting the oldest by timestamp.

    Recording an existing session id replaces its previous record.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        *,
        window: timedelta = DEFAULT_WINDOW,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
        lock: threading.RLock | None = None,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._capacity = capacity
        self._window = window
        self._sample_size = sample_size
        self._lock = lock if lock is not None else threading.RLock()
        self._sessions: dict[str, SessionRecord] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def get(self, session_id: str) -> SessionRecord | None:
        with self._lock:
            return self._sessions.get(session_id)

    def record(self, session_id: str, result: SessionRecord) -> None:
        with self._lock:
            self._sessions[session_id] = result
            while len(self._sessions) > self._capacity:
                oldest = min(self._sessions, key=lambda sid: self._sessions[sid].timestamp)
                del self._sessions[oldest]

    def recent(self, now: datetime) -> list[SessionRecord]:
        """Sessions inside the look-back window, most recent first, capped to the sample size."""
        cutoff = now - self._window
        with self._lock:
            eligible = [r for r in self._sessions.values() if r.timestamp > cutoff]
        eligible.sort(key=lambda r: r.timestamp, reverse=True)
        return eligible[: self._sample_size]

    def overall_pta(self, now: datetime) -> float:
        """Mean PtA of :meth:`recent` sessions, rounded to two decimals; 0 if none."""
        sample = self.recent(now)
        if not sample:
            return 0.0
        return round(sum(r.pta_score for r in sample) / len(sample), 2)

    def context_counts(self) -> dict[str, int]:
        """How many retained sessions carried each page-context flag."""
        with self._lock:
            counts: Counter[str] = Counter()
            for record in self._sessions.values():
                counts.update(record.page_context)
        return dict(sorted(counts.items()))

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()
