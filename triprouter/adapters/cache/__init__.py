"""Cache adapters - Implementations of the CachePort.

Available implementations:
- InMemoryCache: Thread-safe in-memory cache with TTL and LRU eviction
- NullCache: No-op cache for testing (always misses)
- ResultCaches: api / location / route namespaces with async read-through
"""

from .keys import make_cache_key
from .memory_cache import CacheEntry, InMemoryCache
from .null_cache import NullCache
from .result_caches import API, LOCATION, ROUTE, ResultCaches

__all__ = [
    "API",
    "LOCATION",
    "ROUTE",
    "CacheEntry",
    "InMemoryCache",
    "NullCache",
    "ResultCaches",
    "make_cache_key",
]
