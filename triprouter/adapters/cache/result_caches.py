"""Namespaced result caches with async read-through.

Three independent caches back the routing core:

- ``api``: raw upstream provider payloads
- ``location``: location search and nearby-hub lookups
- ``route``: reserved for assembled route searches

``cached_request`` wraps get / miss / produce / set. Concurrent identical
misses can share a single in-flight producer task.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple, TypeVar

from ...config import CacheConfig
from ...ports.cache import CachePort
from .keys import make_cache_key
from .memory_cache import InMemoryCache

T = TypeVar("T")

API = "api"
LOCATION = "location"
ROUTE = "route"

DEFAULT_TTL_SECONDS = 60 * 60


@dataclass
class ResultCaches:
    """Registry of the api / location / route caches.

    Attributes:
        namespaces: Cache per namespace name; ``route`` is allocated but not
            written by the routing engine yet
        single_flight: Share one producer between concurrent identical misses

    Example:
        caches = ResultCaches.from_config(config.cache)
        payload = await caches.cached_request(
            {"type": "flight", "origin": "JFK", "date": "2025-06-01"},
            fetch_flights,
            ttl_seconds=6 * 3600,
        )
    """

    namespaces: Dict[str, CachePort[Any]]
    single_flight: bool = True
    cleanup_interval_seconds: float = 600.0

    _inflight: Dict[Tuple[str, str], "asyncio.Task[Any]"] = field(
        default_factory=dict, repr=False
    )
    _janitor: Optional["asyncio.Task[None]"] = field(default=None, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        if API not in self.namespaces:
            raise ValueError("ResultCaches requires an 'api' namespace")

    @classmethod
    def from_config(cls, config: Optional[CacheConfig] = None) -> ResultCaches:
        config = config or CacheConfig()
        return cls(
            namespaces={
                API: InMemoryCache(name=API, max_size=config.api_max_size),
                LOCATION: InMemoryCache(name=LOCATION, max_size=config.location_max_size),
                ROUTE: InMemoryCache(name=ROUTE, max_size=config.route_max_size),
            },
            single_flight=config.single_flight,
            cleanup_interval_seconds=config.cleanup_interval_seconds,
        )

    @classmethod
    def from_caches(cls, **caches: CachePort[Any]) -> ResultCaches:
        """Build from explicit cache instances, e.g. NullCache in tests."""
        return cls(namespaces=dict(caches))

    def cache(self, namespace: str = API) -> CachePort[Any]:
        """Return the cache for a namespace, falling back to ``api``."""
        return self.namespaces.get(namespace, self.namespaces[API])

    async def cached_request(
        self,
        params: Mapping[str, Any],
        producer: Callable[[], Awaitable[T]],
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        namespace: str = API,
    ) -> T:
        """Return the cached value for ``params`` or produce and store it.

        Producer exceptions propagate and nothing is stored for the key.
        """
        cache = self.cache(namespace)
        key = make_cache_key(params)

        cached = cache.get(key)
        if cached is not None:
            self._logger.debug("Cache hit", extra={"namespace": namespace, "key": key})
            return cached

        self._logger.debug("Cache miss", extra={"namespace": namespace, "key": key})

        if not self.single_flight:
            value = await producer()
            cache.set(key, value, ttl=ttl_seconds)
            return value

        flight_key = (namespace, key)
        task = self._inflight.get(flight_key)
        if task is None:

            async def produce_and_store() -> T:
                value = await producer()
                cache.set(key, value, ttl=ttl_seconds)
                return value

            task = asyncio.ensure_future(produce_and_store())
            self._inflight[flight_key] = task
            task.add_done_callback(lambda t: self._forget(flight_key, t))
        else:
            self._logger.debug(
                "Joining in-flight request", extra={"namespace": namespace, "key": key}
            )

        # One waiter giving up must not cancel the shared producer.
        return await asyncio.shield(task)

    def _forget(self, flight_key: Tuple[str, str], task: "asyncio.Task[Any]") -> None:
        if self._inflight.get(flight_key) is task:
            del self._inflight[flight_key]
        if not task.cancelled():
            # Mark the exception retrieved when every waiter has left.
            task.exception()

    def clear_expired_all(self) -> int:
        """Sweep expired entries from every namespace."""
        removed = sum(cache.clear_expired() for cache in self.namespaces.values())
        if removed:
            self._logger.info("Expired cache entries swept", extra={"removed": removed})
        return removed

    def clear_all(self) -> None:
        for cache in self.namespaces.values():
            cache.clear()

    def stats(self) -> Dict[str, Dict[str, Any]]:
        return {name: cache.stats() for name, cache in self.namespaces.items()}

    def start_janitor(self, interval_seconds: Optional[float] = None) -> "asyncio.Task[None]":
        """Start the periodic expiry sweep on the running event loop."""
        if self._janitor is not None and not self._janitor.done():
            return self._janitor
        interval = interval_seconds or self.cleanup_interval_seconds
        self._janitor = asyncio.get_running_loop().create_task(self._sweep_forever(interval))
        self._logger.info("Cache janitor started", extra={"interval_seconds": interval})
        return self._janitor

    async def stop_janitor(self) -> None:
        if self._janitor is None:
            return
        self._janitor.cancel()
        try:
            await self._janitor
        except asyncio.CancelledError:
            pass
        self._janitor = None
        self._logger.info("Cache janitor stopped")

    async def _sweep_forever(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            self.clear_expired_all()
