"""Tests for the time-decayed tag counter store."""

from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import T0
from interest_signal.config import EngineConfig
from interest_signal.extraction.tags import TagCandidate
from interest_signal.state.counters import TagCounterStore, decayed

PATH = "shopping/apparel/purchase_intent"


def _candidate(path: str = PATH, score: float = 0.5) -> TagCandidate:
    return TagCandidate(path=path, score=score, weight=1.0)


class TestDecayed:
    def test_no_elapsed_time(self):
        assert decayed(2.0, 0.5, T0, T0) == 2.0

    def test_backwards_time_ignored(self):
        assert decayed(2.0, 0.5, T0, T0 - timedelta(hours=3)) == 2.0

    def test_fractional_hours(self):
        assert decayed(1.0, 0.25, T0, T0 + timedelta(minutes=30)) == pytest.approx(0.5)


class TestUpdate:
    def test_window_contributions(self):
        store = TagCounterStore()
        store.update([_candidate(score=0.5)], 2.0, T0)
        counts = store.window_counts(T0)[PATH]
        assert counts["d1"] == pytest.approx(1.0)
        assert counts["d7"] == pytest.approx(0.7)
        assert counts["d30"] == pytest.approx(0.5)

    def test_boost_below_neutral_treated_as_neutral(self):
        store = TagCounterStore()
        store.update([_candidate(score=0.5)], 0.2, T0)
        assert store.short_window_counts([PATH]) == {PATH: pytest.approx(0.5)}

    def test_existing_counter_decays_before_adding(self):
        store = TagCounterStore()
        store.update([_candidate(score=1.0)], 1.0, T0)
        store.update([_candidate(score=1.0)], 1.0, T0 + timedelta(hours=1))
        assert store.short_window_counts([PATH])[PATH] == pytest.approx(0.95 + 1.0)

    def test_no_candidates_is_noop(self):
        store = TagCounterStore()
        store.update([], 3.0, T0)
        assert len(store) == 0
        assert store.intent_boosts(T0) == {}

    def test_unknown_paths_omitted_from_short_window(self):
        store = TagCounterStore()
        store.update([_candidate()], 1.0, T0)
        assert store.short_window_counts([PATH, "a/b/c"]).keys() == {PATH}


class TestLazyDecay:
    def test_read_does_not_mutate(self):
        store = TagCounterStore()
        store.update([_candidate(score=1.0)], 1.0, T0)
        later = T0 + timedelta(hours=10)
        first = store.window_counts(later)
        second = store.window_counts(later)
        assert first == second
        # counter itself still stores the undecayed value
        assert store.short_window_counts([PATH])[PATH] == pytest.approx(1.0)

    def test_decay_is_path_independent(self):
        a = TagCounterStore()
        b = TagCounterStore()
        for store in (a, b):
            store.update([_candidate(score=1.0)], 1.0, T0)
        a.decay_all(T0 + timedelta(hours=3))
        a.decay_all(T0 + timedelta(hours=7))
        b.decay_all(T0 + timedelta(hours=7))
        end = T0 + timedelta(hours=7)
        assert a.window_counts(end)[PATH]["d1"] == pytest.approx(b.window_counts(end)[PATH]["d1"])

    def test_decay_all_idempotent(self):
        store = TagCounterStore()
        store.update([_candidate(score=1.0)], 1.0, T0)
        at = T0 + timedelta(hours=5)
        store.decay_all(at)
        once = store.window_counts(at)
        store.decay_all(at)
        assert store.window_counts(at) == once

    def test_short_window_decays_fastest(self):
        store = TagCounterStore()
        store.update([_candidate(score=1.0)], 1.0, T0)
        counts = store.window_counts(T0 + timedelta(hours=24))[PATH]
        assert counts["d1"] == pytest.approx(0.95**24)
        assert counts["d7"] == pytest.approx(0.7 * 0.98**24)
        assert counts["d30"] == pytest.approx(0.5 * 0.995**24)

    def test_counts_never_increase_without_updates(self):
        store = TagCounterStore()
        store.update([_candidate(score=1.0)], 1.0, T0)
        values = [store.window_counts(T0 + timedelta(hours=h))[PATH]["d1"] for h in range(0, 48, 6)]
        assert values == sorted(values, reverse=True)

    def test_clock_moving_backwards_leaves_counts(self):
        store = TagCounterStore()
        store.update([_candidate(score=1.0)], 1.0, T0)
        store.decay_all(T0 - timedelta(hours=5))
        assert store.window_counts(T0)[PATH]["d1"] == pytest.approx(1.0)


class TestGarbageCollection:
    def test_faded_tags_removed(self):
        store = TagCounterStore()
        store.update([_candidate(score=0.1)], 1.0, T0)
        # d30 = 0.05 * 0.995**h < 0.01 once h > ~321
        result = store.decay_all(T0 + timedelta(hours=400))
        assert result.removed_tags == (PATH,)
        assert result.remaining_tags == 0
        assert PATH not in store

    def test_active_tags_kept(self):
        store = TagCounterStore()
        store.update([_candidate(score=1.0)], 1.0, T0)
        result = store.decay_all(T0 + timedelta(hours=24))
        assert result.removed_tags == ()
        assert PATH in store


class TestIntentBoosts:
    def test_notable_boost_recorded_per_area(self):
        store = TagCounterStore()
        store.update([_candidate()], 2.0, T0)
        assert store.intent_boosts(T0) == {"shopping/apparel": 2.0}

    def test_boost_at_threshold_not_recorded(self):
        store = TagCounterStore()
        store.update([_candidate()], 1.5, T0)
        assert store.intent_boosts(T0) == {}

    def test_boost_takes_max(self):
        store = TagCounterStore()
        store.update([_candidate()], 3.0, T0)
        store.update([_candidate()], 2.0, T0)
        assert store.intent_boosts(T0)["shopping/apparel"] == pytest.approx(3.0)

    def test_boost_decays_and_drops_below_floor(self):
        store = TagCounterStore()
        store.update([_candidate()], 2.0, T0)
        later = T0 + timedelta(hours=2)
        assert store.intent_boosts(later)["shopping/apparel"] == pytest.approx(2.0 * 0.95**2)
        # 2.0 * 0.95**h < 1.1 once h > ~11.6
        result = store.decay_all(T0 + timedelta(hours=12))
        assert result.removed_boosts == ("shopping/apparel",)
        assert store.intent_boosts(T0 + timedelta(hours=12)) == {}

    def test_custom_threshold(self):
        store = TagCounterStore(EngineConfig(notable_boost=1.1))
        store.update([_candidate()], 1.2, T0)
        assert "shopping/apparel" in store.intent_boosts(T0)


class TestReadTop:
    def test_ordered_and_truncated(self):
        store = TagCounterStore()
        store.update(
            [_candidate("a/a/a", 0.3), _candidate("b/b/b", 0.9), _candidate("c/c/c", 0.6)],
            1.0,
            T0,
        )
        assert [path for path, _ in store.read_top(2, T0)] == ["b/b/b", "c/c/c"]

    def test_zero_requested(self):
        store = TagCounterStore()
        store.update([_candidate()], 1.0, T0)
        assert store.read_top(0, T0) == []

    def test_clear(self):
        store = TagCounterStore()
        store.update([_candidate()], 2.0, T0)
        store.clear()
        assert len(store) == 0
        assert store.intent_boosts(T0) == {}
