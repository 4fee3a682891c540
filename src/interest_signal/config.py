"""Engine configuration: every runtime tunable of the signal engine.

An :class:`EngineConfig` is the single object a host provides to adjust
decay behavior, retention bounds and export shape.  The tag-extraction
evidence weights are not here: they are policy constants in
:mod:`interest_signal.extraction.tags`.

Example usage::

    config = EngineConfig(
        sweep_interval=timedelta(minutes=30),
        export_top_n=5,
    )
    engine = InterestSignalEngine(taxonomy, config)

Or from YAML::

    config = load_engine_config("engine.yaml")
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

WINDOWS = ("d1", "d7", "d30")


def _default_hourly_decay() -> dict[str, float]:
    # d1 ~0.29 after 24h, d7 ~0.62, d30 ~0.89
    return {"d1": 0.95, "d7": 0.98, "d30": 0.995}


def _default_window_contribution() -> dict[str, float]:
    return {"d1": 1.0, "d7": 0.7, "d30": 0.5}


@dataclass(frozen=True)
class EngineConfig:
    """Tunables for decay, retention and export.

    Attributes:
        hourly_decay: Per-window multiplicative decay rate applied once per
            elapsed hour.  The short window decays fastest.
        window_contribution: Share of a fresh contribution credited to each
            window.  The short window receives the full contribution.
        gc_epsilon: Counters whose long-window count falls below this are
            dropped on the periodic sweep.
        notable_boost: Intent boosts above this are recorded in the
            sector/subsector boost map.
        boost_hourly_decay: Hourly multiplicative decay of recorded boosts.
        boost_floor: Recorded boosts decayed below this are dropped.
        sweep_interval: Minimum time between two periodic decay sweeps.
        session_capacity: Maximum retained session records.
        session_window: Look-back window for the overall PtA.
        session_sample_size: Most recent sessions averaged for overall PtA.
        export_top_n: Number of tags included in the exported profile.
        export_min_count: Short-window counts at or below this are omitted
            from the export.
        matching_top_n: Number of sector/subsector interests in the
            matching export.
        recency_half_life_hours: Divisor of the behavioral recency factor
            ``exp(-hours_ago / recency_half_life_hours)``.
        default_geo_bucket: Geo bucket reported when the host supplied none.
    """

    hourly_decay: dict[str, float] = field(default_factory=_default_hourly_decay)
    window_contribution: dict[str, float] = field(
        default_factory=_default_window_contribution,
    )
    gc_epsilon: float = 0.01
    notable_boost: float = 1.5
    boost_hourly_decay: float = 0.95
    boost_floor: float = 1.1
    sweep_interval: timedelta = timedelta(hours=1)
    session_capacity: int = 100
    session_window: timedelta = timedelta(hours=24)
    session_sample_size: int = 10
    export_top_n: int = 10
    export_min_count: float = 0.1
    matching_top_n: int = 5
    recency_half_life_hours: float = 24.0
    default_geo_bucket: str = "0x00"

    def __post_init__(self) -> None:
        for name in ("hourly_decay", "window_contribution"):
            mapping = getattr(self, name)
            missing = [w for w in WINDOWS if w not in mapping]
            if missing:
                raise ValueError(f"{name} is missing windows: {', '.join(missing)}")
        for window, rate in self.hourly_decay.items():
            if not 0.0 < rate <= 1.0:
                raise ValueError(f"hourly_decay[{window!r}] must be in (0, 1], got {rate}")
        for window, share in self.window_contribution.items():
            if share < 0:
                raise ValueError(f"window_contribution[{window!r}] must be >= 0, got {share}")
        if not 0.0 < self.boost_hourly_decay <= 1.0:
            raise ValueError("boost_hourly_decay must be in (0, 1]")
        if self.boost_floor < 1.0:
            raise ValueError("boost_floor must be >= 1.0")
        if self.gc_epsilon < 0:
            raise ValueError("gc_epsilon must be >= 0")
        if self.recency_half_life_hours <= 0:
            raise ValueError("recency_half_life_hours must be > 0")
        if self.sweep_interval <= timedelta(0):
            raise ValueError("sweep_interval must be positive")
        if self.session_window <= timedelta(0):
            raise ValueError("session_window must be positive")
        for name in ("session_capacity", "session_sample_size", "export_top_n", "matching_top_n"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1")


_DURATION_FIELDS = {
    "sweep_interval": "sweep_interval_hours",
    "session_window": "session_window_hours",
}


def engine_config_from_mapping(data: dict[str, Any]) -> EngineConfig:
    """Build a config from a plain mapping, overriding defaults key by key.

    Durations are given in hours under ``sweep_interval_hours`` and
    ``session_window_hours``.
    """
    known = {f.name for f in dataclasses.fields(EngineConfig)}
    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        duration_field = next(
            (name for name, alias in _DURATION_FIELDS.items() if alias == key), None,
        )
        if duration_field is not None:
            kwargs[duration_field] = timedelta(hours=float(value))
        elif key in known and key not in _DURATION_FIELDS:
            if key in ("hourly_decay", "window_contribution"):
                merged = getattr(EngineConfig(), key) | dict(value)
                kwargs[key] = {k: float(v) for k, v in merged.items()}
            else:
                kwargs[key] = value
        else:
            raise ValueError(f"Unknown engine config key: {key!r}")
    return EngineConfig(**kwargs)


def load_engine_config(path: str | Path) -> EngineConfig:
    """Load an :class:`EngineConfig` from YAML.  A missing file yields defaults."""
    path = Path(path)
    if not path.is_file():
        logger.warning("Engine config file does not exist, using defaults: %s", path)
        return EngineConfig()
    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        return EngineConfig()
    if not isinstance(raw, dict):
        raise ValueError(f"Engine config YAML root must be a mapping: {path}")
    return engine_config_from_mapping(raw)
