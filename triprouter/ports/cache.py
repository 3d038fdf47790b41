"""Cache port - key/value store with per-entry expiry.

ResultCaches holds one CachePort per namespace (api, location, route);
providers and the location resolver only ever go through it.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Protocol, TypeVar

T = TypeVar("T")


class CachePort(Protocol[T]):
    """A namespace of cached results.

    Implementations:
    - adapters/cache/memory_cache.py (InMemoryCache) - TTL + LRU
    - adapters/cache/null_cache.py (NullCache) - always misses
    """

    def get(self, key: str) -> Optional[T]:
        """Live value for ``key``; None when absent or expired."""
        ...

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        """Store ``value``; ``ttl`` is in seconds, None means the store default."""
        ...

    def get_or_compute(self, key: str, compute_fn: Callable[[], T]) -> T:
        ...

    def delete(self, key: str) -> bool:
        """Drop one entry; False when it was not there."""
        ...

    def clear_expired(self) -> int:
        """Sweep expired entries and return how many went."""
        ...

    def clear(self) -> int:
        ...

    def size(self) -> int:
        ...

    def stats(self) -> Dict[str, Any]:
        ...

    def keys(self) -> list[str]:
        ...
