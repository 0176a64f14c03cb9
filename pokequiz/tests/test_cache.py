"""
Tests for the TTL cache.

Tests:
- Hits within TTL, misses after expiry
- Read-through fetch and failure handling
- Concurrent misses on one key
"""

import threading
import time

import pytest

from ..catalog.cache import TTLCache
from ..errors import UpstreamError
from .conftest import FakeClock


class TestTTLCache:
    """Tests for TTLCache."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def cache(self, clock):
        return TTLCache(ttl=10, clock=clock)

    def test_get_missing_returns_none(self, cache):
        assert cache.get(1) is None

    def test_put_then_get(self, cache):
        cache.put(1, "bulbasaur")
        assert cache.get(1) == "bulbasaur"
        assert len(cache) == 1

    def test_entry_expires(self, cache, clock):
        """An entry is served until its expiry and not after."""
        cache.put(1, "bulbasaur")
        clock.advance(9.9)
        assert cache.get(1) == "bulbasaur"
        clock.advance(0.1)
        assert cache.get(1) is None

    def test_get_or_fetch_calls_once_within_ttl(self, cache):
        calls = []

        def fetch():
            calls.append(1)
            return "ivysaur"

        assert cache.get_or_fetch(2, fetch) == "ivysaur"
        assert cache.get_or_fetch(2, fetch) == "ivysaur"
        assert len(calls) == 1

    def test_get_or_fetch_refetches_after_expiry(self, cache, clock):
        values = iter(["old", "new"])
        assert cache.get_or_fetch(3, lambda: next(values)) == "old"
        clock.advance(11)
        assert cache.get_or_fetch(3, lambda: next(values)) == "new"
        assert cache.get(3) == "new"

    def test_failed_fetch_is_not_cached(self, cache):
        def failing():
            raise UpstreamError("down")

        with pytest.raises(UpstreamError):
            cache.get_or_fetch(4, failing)
        assert cache.get(4) is None
        assert cache.get_or_fetch(4, lambda: "venusaur") == "venusaur"

    def test_clear(self, cache):
        cache.put(1, "a")
        cache.put(2, "b")
        cache.clear()
        assert len(cache) == 0

    def test_concurrent_misses_fetch_once(self):
        """Threads missing the same key share a single fetch."""
        cache = TTLCache(ttl=60)
        calls = []
        calls_lock = threading.Lock()
        start = threading.Barrier(8)

        def fetch():
            with calls_lock:
                calls.append(1)
            time.sleep(0.05)
            return "pikachu"

        results = []

        def worker():
            start.wait()
            results.append(cache.get_or_fetch(25, fetch))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results == ["pikachu"] * 8
        assert len(calls) == 1
