"""
TTL Cache - In-memory read-through cache for catalog lookups.

The cache:
- Is keyed by catalog identity (int)
- Stores each value with an absolute expiry time
- Evicts only by expiry (no size bound)
- Never stores failures (a raising fetch leaves the key empty)

Design decisions:
- One lock guards the entry map; readers never see a half-written entry
- One lock per key serializes fetches, so concurrent misses on the same
  key result in a single upstream call
- The clock is injectable so tests can move time forward
"""

from __future__ import annotations
import threading
import time
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """
    A cached value with its expiry.
    """
    value: T
    expires_at: float

    # Cache metadata
    created_at: float = 0.0
    access_count: int = 0

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at


class TTLCache(Generic[T]):
    """
    Expiring cache with read-through fetch.

    Usage:
        cache = TTLCache(ttl=1800)

        # Serve from cache, fetch on miss
        entity = cache.get_or_fetch(25, lambda: client.download(25))
    """

    def __init__(
        self,
        ttl: float,
        clock: Callable[[], float] = time.monotonic,
        name: str = "cache",
    ):
        self.ttl = ttl
        self.name = name
        self._clock = clock
        self._entries: dict[int, CacheEntry[T]] = {}
        self._lock = threading.Lock()
        self._key_locks: dict[int, threading.Lock] = {}

    def get(self, key: int) -> T | None:
        """
        Get a fresh cached value.

        Returns None if absent or expired.
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or not entry.is_fresh(now):
                return None
            entry.access_count += 1
            return entry.value

    def put(self, key: int, value: T):
        """
        Store a value, replacing any previous entry for the key.
        """
        now = self._clock()
        entry = CacheEntry(
            value=value,
            expires_at=now + self.ttl,
            created_at=now,
        )
        with self._lock:
            self._entries[key] = entry

    def get_or_fetch(self, key: int, fetch: Callable[[], T]) -> T:
        """
        Return the cached value, or call fetch() and cache its result.

        Exceptions from fetch() propagate and nothing is cached.
        """
        value = self.get(key)
        if value is not None:
            return value

        with self._key_lock(key):
            # Another thread may have filled the entry while we waited
            value = self.get(key)
            if value is not None:
                return value
            value = fetch()
            self.put(key, value)
            return value

    def clear(self):
        """
        Drop every entry.
        """
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _key_lock(self, key: int) -> threading.Lock:
        with self._lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._key_locks[key] = lock
            return lock
