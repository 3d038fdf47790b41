"""Always-miss cache.

Plugged into ResultCaches when provider tests must hit the upstream on
every call, or to switch a namespace off without touching callers.

Example:
    caches = ResultCaches.from_caches(api=NullCache(), location=NullCache())
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class NullCache(Generic[T]):
    """Cache that stores nothing; every lookup reaches the producer."""

    name: str = "null"

    def get(self, key: str) -> Optional[T]:
        return None

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        pass

    def get_or_compute(self, key: str, compute_fn: Callable[[], T]) -> T:
        return compute_fn()

    def delete(self, key: str) -> bool:
        return False

    def clear_expired(self) -> int:
        return 0

    def clear(self) -> int:
        return 0

    def size(self) -> int:
        return 0

    def stats(self) -> Dict[str, int]:
        return {
            "size": 0,
            "hits": 0,
            "misses": 0,
            "evictions": 0,
            "hit_rate_percent": 0,
        }

    def keys(self) -> list[str]:
        return []
