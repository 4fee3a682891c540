"""Mutable engine state: decayed tag counters and recent session results."""

from interest_signal.state.counters import SweepResult, TagCounterStore, decayed
from interest_signal.state.sessions import SessionAggregator, SessionRecord

__all__ = [
    "SessionAggregator",
    "SessionRecord",
    "SweepResult",
    "TagCounterStore",
    "decayed",
]
