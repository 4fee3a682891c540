"""Time-decayed tag counters and the sector/subsector intent-boost map.

Each tag owns three exponentially decaying accumulators (``d1``, ``d7``,
``d30``).  Decay is lazy: a window stores the time it was last brought
current and ``count *= rate ** hours_elapsed`` is applied only when the
window is written or swept.  Reads compute the decayed value without
mutating, so a read never changes what a later write or sweep sees.

Decaying twice to the same instant is a no-op, and decaying to ``t1`` then
``t2`` equals decaying straight to ``t2``.  Time moving backwards is ignored.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, NamedTuple

from interest_signal.config import WINDOWS, EngineConfig
from interest_signal.taxonomy.models import area_of

if TYPE_CHECKING:
    from interest_signal.extraction.tags import TagCandidate

logger = logging.getLogger(__name__)

_SECONDS_PER_HOUR = 3600.0


def _hours_between(earlier: datetime, later: datetime) -> float:
    return (later - earlier).total_seconds() / _SECONDS_PER_HOUR


def decayed(value: float, rate: float, since: datetime, now: datetime) -> float:
    """*value* after decaying at *rate* per hour from *since* to *now*."""
    hours = _hours_between(since, now)
    if hours <= 0:
        return value
    return value * rate**hours


@dataclass
class WindowCount:
    count: float
    last_update: datetime


@dataclass
class TagCounter:
    """Per-tag accumulators, one per decay window."""

    windows: dict[str, WindowCount]

    @classmethod
    def fresh(cls, now: datetime) -> TagCounter:
        return cls(windows={w: WindowCount(0.0, now) for w in WINDOWS})

    def decay_to(self, now: datetime, hourly_decay: dict[str, float]) -> None:
        for name, window in self.windows.items():
            if _hours_between(window.last_update, now) <= 0:
                continue
            window.count = decayed(window.count, hourly_decay[name], window.last_update, now)
            window.last_update = now

    def value_at(self, window: str, now: datetime, hourly_decay: dict[str, float]) -> float:
        w = self.windows[window]
        return decayed(w.count, hourly_decay[window], w.last_update, now)


@dataclass
class BoostEntry:
    value: float
    last_update: datetime


class SweepResult(NamedTuple):
    removed_tags: tuple[str, ...]
    removed_boosts: tuple[str, ...]
    remaining_tags: int


@dataclass
class _Snapshot:
    counts: dict[str, dict[str, float]] = field(default_factory=dict)
    boosts: dict[str, float] = field(default_factory=dict)


class TagCounterStore:
    """Owns every tag counter and intent boost.  Thread-safe.

    Parameters
    ----------
    config:
        Decay rates, window contributions and pruning thresholds.
    lock:
        Optional ``threading.RLock`` shared with the owning engine so that a
        sweep and an update never interleave.  One is created if not supplied.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        lock: threading.RLock | None = None,
    ) -> None:
        self._config = config or EngineConfig()
        self._lock = lock if lock is not None else threading.RLock()
        self._counters: dict[str, TagCounter] = {}
        self._boosts: dict[str, BoostEntry] = {}

    @property
    def config(self) -> EngineConfig:
        return self._config

    def __len__(self) -> int:
        with self._lock:
            return len(self._counters)

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return path in self._counters

    # -- writes ---------------------------------------------------------------

    def update(
        self, candidates: Iterable[TagCandidate], intent_boost: float, now: datetime,
    ) -> None:
        """Fold one observation's tag candidates into the counters.

        Each counter is brought current first, then every window grows by
        ``score * intent_boost * window_contribution[window]``.
        """
        cfg = self._config
        boost = intent_boost if intent_boost >= 1.0 else 1.0
        with self._lock:
            for candidate in candidates:
                contribution = max(candidate.score, 0.0) * boost
                counter = self._counters.get(candidate.path)
                if counter is None:
                    counter = TagCounter.fresh(now)
                    self._counters[candidate.path] = counter
                else:
                    counter.decay_to(now, cfg.hourly_decay)
                for name, window in counter.windows.items():
                    window.count += contribution * cfg.window_contribution[name]

                if boost > cfg.notable_boost:
                    self._raise_boost(area_of(candidate.path), boost, now)

    def _raise_boost(self, area: str, boost: float, now: datetime) -> None:
        entry = self._boosts.get(area)
        if entry is None:
            self._boosts[area] = BoostEntry(boost, now)
            return
        current = decayed(entry.value, self._config.boost_hourly_decay, entry.last_update, now)
        entry.value = max(current, boost)
        entry.last_update = max(entry.last_update, now)

    def decay_all(self, now: datetime) -> SweepResult:
        """Bring every counter and boost current and prune the faded ones.

        Tags whose long-window count is below ``gc_epsilon`` and boosts that
        decayed under ``boost_floor`` are removed.
        """
        cfg = self._config
        with self._lock:
            removed_tags: list[str] = []
            for path, counter in list(self._counters.items()):
                counter.decay_to(now, cfg.hourly_decay)
                if counter.windows["d30"].count < cfg.gc_epsilon:
                    del self._counters[path]
                    removed_tags.append(path)

            removed_boosts: list[str] = []
            for area, entry in list(self._boosts.items()):
                if _hours_between(entry.last_update, now) > 0:
                    entry.value = decayed(
                        entry.value, cfg.boost_hourly_decay, entry.last_update, now,
                    )
                    entry.last_update = now
                if entry.value < cfg.boost_floor:
                    del self._boosts[area]
                    removed_boosts.append(area)

            if removed_tags or removed_boosts:
                logger.debug(
                    "Decay sweep removed %d tags and %d boosts",
                    len(removed_tags), len(removed_boosts),
                )
            return SweepResult(tuple(removed_tags), tuple(removed_boosts), len(self._counters))

    def clear(self) -> None:
        """Drop all state.  Intended for tests and explicit user resets."""
        with self._lock:
            self._counters.clear()
            self._boosts.clear()

    # -- reads ----------------------------------------------------------------

    def short_window_counts(
        self, paths: Iterable[str], now: datetime | None = None,
    ) -> dict[str, float]:
        """Short-window counts for the given paths that have a counter.

        Without *now* the values are as of each counter's last update.
        """
        cfg = self._config
        with self._lock:
            result: dict[str, float] = {}
            for path in paths:
                counter = self._counters.get(path)
                if counter is None:
                    continue
                if now is None:
                    result[path] = counter.windows["d1"].count
                else:
                    result[path] = counter.value_at("d1", now, cfg.hourly_decay)
            return result

    def read_top(self, n: int, now: datetime) -> list[tuple[str, float]]:
        """Top *n* tags by short-window count as of *now*, highest first."""
        if n <= 0:
            return []
        snapshot = self._snapshot(now)
        ranked = sorted(
            ((path, windows["d1"]) for path, windows in snapshot.counts.items()),
            key=lambda item: item[1],
            reverse=True,
        )
        return ranked[:n]

    def window_counts(self, now: datetime) -> dict[str, dict[str, float]]:
        """All windows of all tags as of *now*."""
        return self._snapshot(now).counts

    def intent_boosts(self, now: datetime) -> dict[str, float]:
        """Recorded sector/subsector boosts as of *now*."""
        return self._snapshot(now).boosts

    def _snapshot(self, now: datetime) -> _Snapshot:
        cfg = self._config
        with self._lock:
            snap = _Snapshot()
            for path, counter in self._counters.items():
                snap.counts[path] = {
                    name: counter.value_at(name, now, cfg.hourly_decay)
                    for name in counter.windows
                }
            for area, entry in self._boosts.items():
                snap.boosts[area] = decayed(
                    entry.value, cfg.boost_hourly_decay, entry.last_update, now,
                )
            return snap
