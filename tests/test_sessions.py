"""Tests for the bounded session aggregator."""

from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import T0
from interest_signal.state.sessions import SessionAggregator, SessionRecord


def _record(pta_score: float = 0.5, *, minutes: float = 0, context=frozenset()) -> SessionRecord:
    return SessionRecord(
        tags=("a/b/c",),
        intent_label="research_phase",
        intent_boost=1.0,
        behavioral_score=0.5,
        pta_score=pta_score,
        timestamp=T0 + timedelta(minutes=minutes),
        page_context=context,
    )


class TestCapacity:
    def test_oldest_evicted(self):
        sessions = SessionAggregator(capacity=3)
        for i in range(4):
            sessions.record(f"s{i}", _record(minutes=i))
        assert len(sessions) == 3
        assert sessions.get("s0") is None
        assert sessions.get("s3") is not None

    def test_eviction_by_timestamp_not_insertion(self):
        sessions = SessionAggregator(capacity=2)
        sessions.record("late", _record(minutes=10))
        sessions.record("early", _record(minutes=1))
        sessions.record("newest", _record(minutes=20))
        assert sessions.get("early") is None
        assert sessions.get("late") is not None

    def test_same_session_replaced(self):
        sessions = SessionAggregator(capacity=2)
        sessions.record("s1", _record(0.4))
        sessions.record("s1", _record(0.9, minutes=1))
        assert len(sessions) == 1
        assert sessions.get("s1").pta_score == 0.9

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            SessionAggregator(capacity=0)


class TestOverallPta:
    def test_empty_is_zero(self):
        assert SessionAggregator().overall_pta(T0) == 0.0

    def test_mean_rounded(self):
        sessions = SessionAggregator()
        sessions.record("a", _record(0.61))
        sessions.record("b", _record(0.70))
        sessions.record("c", _record(0.80))
        assert sessions.overall_pta(T0) == 0.70

    def test_sessions_outside_window_ignored(self):
        sessions = SessionAggregator()
        sessions.record("old", _record(0.9))
        sessions.record("new", _record(0.6, minutes=25 * 60))
        now = T0 + timedelta(hours=25)
        assert sessions.overall_pta(now) == 0.6

    def test_boundary_is_exclusive(self):
        sessions = SessionAggregator()
        sessions.record("edge", _record(0.9))
        assert sessions.overall_pta(T0 + timedelta(hours=24)) == 0.0

    def test_only_most_recent_sample_averaged(self):
        sessions = SessionAggregator(sample_size=10)
        for i in range(15):
            # the five oldest carry 0.0, the ten newest 1.0
            sessions.record(f"s{i}", _record(0.0 if i < 5 else 1.0, minutes=i))
        assert sessions.overall_pta(T0 + timedelta(hours=1)) == 1.0
        assert len(sessions.recent(T0 + timedelta(hours=1))) == 10


class TestContextCounts:
    def test_counts_flags_across_sessions(self):
        sessions = SessionAggregator()
        sessions.record("a", _record(context=frozenset({"product_page"})))
        sessions.record("b", _record(context=frozenset({"product_page", "video_page"})))
        assert sessions.context_counts() == {"product_page": 2, "video_page": 1}

    def test_clear(self):
        sessions = SessionAggregator()
        sessions.record("a", _record())
        sessions.clear()
        assert len(sessions) == 0
