"""Tests for the mood dictionary cache"""

import threading
import time

import pytest

from moodsnap.moods.cache import CacheState, MoodDictionaryCache
from moodsnap.types import MoodEntry


class FakeClock:
    """Manually advanced clock"""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(mock_mood_source, clock):
    return MoodDictionaryCache(mock_mood_source, ttl_seconds=300, clock=clock)


class TestFetch:
    """Loading entries from the source"""

    def test_initial_state(self, cache):
        assert cache.state == CacheState.UNINITIALIZED
        assert cache.get_by_id("calm") is None

    def test_guest_fetch_loads_system_only(self, cache, mock_mood_source):
        cache.fetch_all()

        assert cache.get_by_id("calm").name == "Calm"
        assert cache.get_by_id("custom_1") is None
        mock_mood_source.fetch_custom.assert_not_called()
        assert cache.state == CacheState.READY

    def test_user_fetch_includes_custom(self, cache, mock_mood_source):
        cache.fetch_all("alice")

        assert cache.get_by_id("custom_1").name == "Sunburst"
        mock_mood_source.fetch_custom.assert_called_once_with("alice")
        assert cache.current_user_id == "alice"

    def test_fetch_replaces_whole_map(self, cache, mock_mood_source):
        cache.fetch_all("alice")
        mock_mood_source.fetch_system.return_value = [
            MoodEntry(id="tired", name="Tired", type="system", color="#8B88C4"),
        ]
        mock_mood_source.fetch_custom.return_value = []

        cache.fetch_all("alice")

        assert cache.get_by_id("calm") is None
        assert cache.get_by_id("custom_1") is None
        assert cache.get_by_id("tired") is not None

    def test_source_failure_keeps_previous_entries(self, cache, mock_mood_source, clock):
        cache.fetch_all()
        mock_mood_source.fetch_system.side_effect = RuntimeError("database down")
        clock.now += 1000

        cache.fetch_all()

        assert cache.get_by_id("calm") is not None
        assert cache.state == CacheState.STALE

    def test_custom_failure_still_loads_system(self, cache, mock_mood_source):
        mock_mood_source.fetch_custom.side_effect = RuntimeError("timeout")

        cache.fetch_all("alice")

        assert cache.get_by_id("calm") is not None
        assert cache.get_by_id("custom_1") is None


class TestStaleness:
    """TTL and invalidation"""

    def test_stale_after_ttl(self, cache, clock):
        cache.fetch_all()
        clock.now += 299
        assert not cache.is_stale()
        clock.now += 2
        assert cache.is_stale()
        assert cache.state == CacheState.STALE

    def test_invalidate_keeps_entries(self, cache):
        cache.fetch_all()
        cache.invalidate()

        assert cache.is_stale()
        assert cache.get_by_id("calm") is not None

    def test_ensure_fresh_skips_when_fresh(self, cache, mock_mood_source):
        cache.ensure_fresh("alice")
        cache.ensure_fresh("alice")
        assert mock_mood_source.fetch_system.call_count == 1

    def test_ensure_fresh_refetches_when_stale(self, cache, mock_mood_source):
        cache.ensure_fresh()
        cache.invalidate()
        cache.ensure_fresh()
        assert mock_mood_source.fetch_system.call_count == 2

    def test_identity_switch_refetches(self, cache, mock_mood_source):
        cache.ensure_fresh("alice")
        cache.ensure_fresh(None)

        assert mock_mood_source.fetch_system.call_count == 2
        assert cache.current_user_id is None
        assert cache.get_by_id("custom_1") is None


class TestSingleFlight:
    """Concurrent fetches share one load"""

    def test_concurrent_fetches_share_one_load(self, cache, mock_mood_source):
        release = threading.Event()
        entries = mock_mood_source.fetch_system.return_value

        def slow_fetch():
            release.wait(timeout=5)
            return entries

        mock_mood_source.fetch_system.side_effect = slow_fetch

        first = threading.Thread(target=cache.fetch_all, args=("alice",))
        first.start()
        deadline = time.monotonic() + 5
        while not cache.is_loading() and time.monotonic() < deadline:
            time.sleep(0.01)
        assert cache.state == CacheState.LOADING

        joiners = [threading.Thread(target=cache.fetch_all, args=("alice",)) for _ in range(3)]
        for thread in joiners:
            thread.start()
        time.sleep(0.1)
        release.set()

        for thread in [first, *joiners]:
            thread.join(timeout=5)

        assert mock_mood_source.fetch_system.call_count == 1
        assert cache.get_by_id("custom_1") is not None
        assert not cache.is_loading()

    def test_different_identity_waits_then_fetches(self, cache, mock_mood_source):
        release = threading.Event()
        entries = mock_mood_source.fetch_system.return_value

        def slow_fetch():
            release.wait(timeout=5)
            return entries

        mock_mood_source.fetch_system.side_effect = slow_fetch

        first = threading.Thread(target=cache.fetch_all, args=("alice",))
        first.start()
        deadline = time.monotonic() + 5
        while not cache.is_loading() and time.monotonic() < deadline:
            time.sleep(0.01)

        second = threading.Thread(target=cache.fetch_all, args=(None,))
        second.start()
        time.sleep(0.1)
        release.set()
        first.join(timeout=5)
        second.join(timeout=5)

        assert mock_mood_source.fetch_system.call_count == 2
        assert cache.current_user_id is None
