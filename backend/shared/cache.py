"""Thread-safe in-process TTL cache.

Uses cachetools.TTLCache for zero-infrastructure caching. Entries expire a
fixed number of seconds after insertion; expiry is checked lazily on lookup.

Event threads and background workers share these caches, so every access is
guarded by a lock (TTLCache itself is not thread-safe).
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Any

from cachetools import TTLCache  # type: ignore[import-untyped]

# Sentinel object to distinguish "not in cache" from cached None values
MISSING = object()


class ExpiringCache:
    """TTL cache that may store ``None`` as a real value.

    *timer* is forwarded to TTLCache; tests pass a fake clock to drive expiry.
    """

    def __init__(
        self,
        maxsize: int = 1024,
        ttl: float = 60.0,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        """Return the live value or ``MISSING``."""
        with self._lock:
            return self._cache.get(key, MISSING)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._cache[key] = value

    def get_or_compute(self, key: str, factory: Callable[[str], Any]) -> Any:
        """Return the cached value, computing and storing it on a miss.

        The factory runs outside the lock; two threads missing the same key
        may both compute it, and the last write wins.
        """
        value = self.get(key)
        if value is not MISSING:
            return value
        value = factory(key)
        self.set(key, value)
        return value

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    @property
    def size(self) -> int:
        with self._lock:
            # expire() drops stale entries so the count reflects live ones
            self._cache.expire()
            return len(self._cache)
