"""Thread-safe in-memory cache with per-entry TTL and LRU eviction.

Entries remember when they expire and when they were last read. Reading
an expired entry removes it; inserting a new key into a full cache evicts
the entry that was read least recently (not the oldest insertion).
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(slots=True)
class CacheEntry(Generic[T]):
    """A cached value with its expiry and access bookkeeping."""

    value: T
    expires_at: float
    last_accessed_at: float
    access_seq: int = 0

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


@dataclass
class InMemoryCache(Generic[T]):
    """Bounded in-memory cache with TTL and true LRU eviction.

    Attributes:
        max_size: Maximum number of entries (None = unlimited)
        default_ttl_seconds: TTL used when set() gets none (None = no expiry)
        name: Cache name for logging
        clock: Time source in seconds, injectable for tests

    Example:
        cache = InMemoryCache[list](name="location", max_size=100)
        cache.set("q:paris", locations, ttl=86400)
    """

    max_size: Optional[int] = None
    default_ttl_seconds: Optional[float] = None
    name: str = "cache"
    clock: Callable[[], float] = time.monotonic

    _store: Dict[str, CacheEntry[T]] = field(default_factory=dict, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _seq: Any = field(default_factory=itertools.count, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    # Statistics
    _hits: int = field(default=0, repr=False)
    _misses: int = field(default=0, repr=False)
    _evictions: int = field(default=0, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(f"cache.{self.name}")

    def get(self, key: str) -> Optional[T]:
        """Live value for ``key``, or None. Refreshes its recency."""
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return None

            now = self.clock()
            if entry.is_expired(now):
                del self._store[key]
                self._logger.debug("Cache entry expired", extra={"key": key})
                self._misses += 1
                return None

            entry.last_accessed_at = now
            entry.access_seq = next(self._seq)
            self._hits += 1
            return entry.value

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        """Store ``value`` for ``ttl`` seconds (default_ttl_seconds when omitted).

        Inserting a new key into a full cache evicts the least recently
        read entry first.
        """
        with self._lock:
            if (
                self.max_size is not None
                and key not in self._store
                and len(self._store) >= self.max_size
            ):
                self._evict_lru()

            effective_ttl = ttl if ttl is not None else self.default_ttl_seconds
            now = self.clock()
            expires_at = now + effective_ttl if effective_ttl is not None else float("inf")

            self._store[key] = CacheEntry(
                value=value,
                expires_at=expires_at,
                last_accessed_at=now,
                access_seq=next(self._seq),
            )
            self._logger.debug(
                "Cache entry set",
                extra={"key": key, "ttl": effective_ttl},
            )

    def _evict_lru(self) -> None:
        """Drop the entry that was accessed least recently."""
        if not self._store:
            return
        oldest_key = min(
            self._store,
            key=lambda k: (self._store[k].last_accessed_at, self._store[k].access_seq),
        )
        del self._store[oldest_key]
        self._evictions += 1
        self._logger.debug(
            "Cache evicted entry",
            extra={"key": oldest_key, "reason": "max_size"},
        )

    def get_or_compute(self, key: str, compute_fn: Callable[[], T]) -> T:
        """Read-through helper for synchronous callers.

        None is never cached, so a producer returning None runs again on
        the next call.
        """
        cached = self.get(key)
        if cached is not None:
            return cached

        # producer runs without the lock held
        produced = compute_fn()
        if produced is not None:
            self.set(key, produced)
        return produced

    def delete(self, key: str) -> bool:
        """Remove a specific cache entry.

        Returns:
            True if the key existed and was removed.
        """
        with self._lock:
            if key in self._store:
                del self._store[key]
                self._logger.debug("Cache entry deleted", extra={"key": key})
                return True
            return False

    invalidate = delete

    def clear_expired(self) -> int:
        """Drop every expired entry.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            now = self.clock()
            expired = [k for k, entry in self._store.items() if entry.is_expired(now)]
            for key in expired:
                del self._store[key]
            if expired:
                self._logger.debug(
                    "Cache expired entries cleared",
                    extra={"entries_cleared": len(expired)},
                )
            return len(expired)

    def clear(self) -> int:
        """Drop every entry and reset the counters; returns how many were dropped."""
        with self._lock:
            count = len(self._store)
            self._store.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0
            self._logger.info("Cache cleared", extra={"entries_cleared": count})
            return count

    def size(self) -> int:
        """Return the number of entries in the cache."""
        with self._lock:
            return len(self._store)

    def stats(self) -> Dict[str, Any]:
        """Size, hit, miss and eviction counters."""
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0.0
            return {
                "size": len(self._store),
                "max_size": self.max_size,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "hit_rate_percent": round(hit_rate, 1),
            }

    def keys(self) -> list[str]:
        """Return all keys in the cache."""
        with self._lock:
            return list(self._store.keys())
