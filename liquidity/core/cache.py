"""liquidity.core.cache

In-memory cache with TTL.

A cache is a lie you tell yourself to go faster.
A TTL is the part where you admit you might be wrong.

Invalidation is lazy: an expired entry is dropped by the read that notices it.
Reads never extend an entry's life.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class CacheEntry:
    key: str
    data: Any
    stored_at: float  # seconds, on the cache's clock
    ttl_ms: float

    def expired(self, now: float) -> bool:
        return (now - self.stored_at) * 1000.0 > self.ttl_ms


_MISSING = object()


class TTLCache:
    """Thread-safe TTL cache.

    `clock` returns seconds and is injectable so tests can move time by hand.
    """

    def __init__(self, default_ttl_ms: float = 30_000.0, *, clock: Callable[[], float] = time.monotonic):
        self._default_ttl_ms = float(default_ttl_ms)
        self._clock = clock
        self._store: dict[str, CacheEntry] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store

    def get(self, key: str, default: Any = None) -> Any:
        entry = self.get_entry(key)
        return default if entry is None else entry.data

    def get_entry(self, key: str) -> CacheEntry | None:
        now = self._clock()
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if entry.expired(now):
                self._store.pop(key, None)
                return None
            return entry

    def set(self, key: str, value: Any, *, ttl_ms: float | None = None) -> CacheEntry:
        ttl = self._default_ttl_ms if ttl_ms is None else float(ttl_ms)
        entry = CacheEntry(key=str(key), data=value, stored_at=self._clock(), ttl_ms=ttl)
        with self._lock:
            self._store[entry.key] = entry
        return entry

    def get_or_set(self, key: str, factory: Callable[[], Any], *, ttl_ms: float | None = None) -> Any:
        val = self.get(key, _MISSING)
        if val is not _MISSING:
            return val
        val = factory()
        self.set(key, val, ttl_ms=ttl_ms)
        return val

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
