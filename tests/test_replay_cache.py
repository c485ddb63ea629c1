"""
Unit Tests for the replay cache
"""

import threading

import pytest

from fingerprint_core.replay_cache import ReplayCache

NOW = 1_704_067_200


class FakeClock:
    def __init__(self, now: float = NOW):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ReplayCache(freshness_window_seconds=10, admission_threshold=2, clock=clock)


class TestReplayCache:
    """Tests for soft replay admission."""

    def test_three_presentations_then_blocked(self, cache):
        """Threshold 2 admits the 1st through 3rd presentation."""
        assert cache.is_blocked(NOW, "token-a") is False
        assert cache.is_blocked(NOW, "token-a") is False
        assert cache.is_blocked(NOW, "token-a") is False
        assert cache.is_blocked(NOW, "token-a") is True
        assert cache.is_blocked(NOW, "token-a") is True

        assert cache.count("token-a") == 3

    def test_tokens_counted_separately(self, cache):
        for _ in range(4):
            cache.is_blocked(NOW, "token-a")

        assert cache.is_blocked(NOW, "token-b") is False
        assert len(cache) == 2

    def test_zero_threshold_is_single_use(self, clock):
        cache = ReplayCache(admission_threshold=0, clock=clock)

        assert cache.is_blocked(NOW, "token") is False
        assert cache.is_blocked(NOW, "token") is True

    def test_stale_never_blocked(self, cache, clock):
        """Past the window the cache is permissive and does not record."""
        for _ in range(3):
            cache.is_blocked(NOW, "token-a")

        clock.now = NOW + 11
        for _ in range(10):
            assert cache.is_blocked(NOW, "token-a") is False

    def test_window_boundary_is_inclusive(self, cache, clock):
        clock.now = NOW + 10
        for _ in range(3):
            assert cache.is_blocked(NOW, "token-a") is False
        assert cache.is_blocked(NOW, "token-a") is True

    def test_future_timestamp_is_fresh(self, cache):
        for _ in range(3):
            cache.is_blocked(NOW + 300, "token-a")

        assert cache.is_blocked(NOW + 300, "token-a") is True

    @pytest.mark.parametrize("timestamp", [0, -5, 1.5, float("nan"), float("inf"), "1704067200", None, True])
    def test_unverifiable_timestamp_not_blocked(self, cache, timestamp):
        for _ in range(5):
            assert cache.is_blocked(timestamp, "token-a") is False
        assert len(cache) == 0

    def test_integral_float_timestamp_accepted(self, cache):
        for _ in range(3):
            cache.is_blocked(float(NOW), "token-a")

        assert cache.is_blocked(float(NOW), "token-a") is True

    def test_entries_kept_without_max_age(self, cache, clock):
        cache.is_blocked(NOW, "token-a")
        clock.now = NOW + 100_000

        assert len(cache) == 1

    def test_max_age_prunes_old_entries(self, clock):
        cache = ReplayCache(max_age_seconds=30, clock=clock)
        cache.is_blocked(NOW, "old")

        clock.now = NOW + 31
        cache.is_blocked(NOW + 31, "new")

        assert cache.count("old") == 0
        assert cache.count("new") == 1

    def test_clear(self, cache):
        cache.is_blocked(NOW, "token-a")
        cache.clear()

        assert len(cache) == 0


class TestReplayCacheConcurrency:
    """Concurrent presentations must not exceed the admission count."""

    def test_concurrent_admissions_bounded(self, cache):
        results = []
        results_lock = threading.Lock()
        barrier = threading.Barrier(16)

        def present():
            barrier.wait()
            blocked = cache.is_blocked(NOW, "shared-token")
            with results_lock:
                results.append(blocked)

        threads = [threading.Thread(target=present) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(False) == 3
        assert results.count(True) == 13
