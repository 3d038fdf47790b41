"""Location resolver service.

Turns ids and free text into Location objects. Live place search is
optional; the bundled dataset answers whenever the live provider is
disabled, empty or failing. Every location seen is remembered in an
in-memory index so later requests can resolve it by id.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..adapters.cache import LOCATION, ResultCaches
from ..config import LocationConfig, get_config
from ..domain.models import Location
from ..ports.locations import LocationRepositoryPort, LocationSearchPort

MIN_QUERY_LENGTH = 2


@dataclass
class LocationResolver:
    """Search, resolve and expand locations.

    Attributes:
        repository: Bounded dataset of known places and hubs
        caches: Result caches; lookups go to the ``location`` namespace
        search_provider: Optional live place search (e.g. Nominatim)
        config: TTLs and hub limits
    """

    repository: LocationRepositoryPort
    caches: ResultCaches
    search_provider: Optional[LocationSearchPort] = None
    config: LocationConfig = field(default_factory=lambda: get_config().location)

    _index: Dict[str, Location] = field(default_factory=dict, repr=False)
    _codes: Dict[str, Location] = field(default_factory=dict, repr=False)
    _index_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        self._remember(self.repository.list_locations())

    def _remember(self, locations: Sequence[Location]) -> None:
        with self._index_lock:
            for location in locations:
                self._index.setdefault(location.id, location)
                self._index.setdefault(location.id.lower(), location)
                for code in location.provider_codes.values():
                    self._codes.setdefault(code, location)

    def _lookup(self, location_id: str) -> Optional[Location]:
        with self._index_lock:
            return (
                self._index.get(location_id)
                or self._index.get(location_id.lower())
                or self._codes.get(location_id)
            )

    async def search(self, query: str) -> List[Location]:
        """Search places by free text.

        Queries shorter than two characters return nothing. Results are
        cached per normalized query and never raise for provider failure.
        """
        normalized = query.strip().lower()
        if len(normalized) < MIN_QUERY_LENGTH:
            return []

        results: Tuple[Location, ...] = await self.caches.cached_request(
            {"type": "location_search", "query": normalized},
            lambda: self._search_uncached(normalized),
            ttl_seconds=self.config.search_ttl_seconds,
            namespace=LOCATION,
        )
        self._remember(results)
        return list(results)

    async def _search_uncached(self, query: str) -> Tuple[Location, ...]:
        if self.search_provider is not None:
            try:
                found = await self.search_provider.search(query)
            except Exception as e:
                self._logger.warning(
                    "Live location search failed, using dataset",
                    extra={"query": query, "error": str(e)},
                )
            else:
                if found:
                    return tuple(found)
                self._logger.debug("Live location search empty", extra={"query": query})

        return tuple(await self.repository.search(query))

    async def find_nearby_transport_hubs(self, location_name: str) -> List[Location]:
        """Hubs serving the place called ``location_name``."""
        matches = await self.search(location_name)
        if not matches:
            return []
        return await self.hubs_near(matches[0])

    async def hubs_near(self, location: Location) -> List[Location]:
        """Hubs serving an already resolved location.

        A city maps to known hubs whose name mentions the city; a hub
        maps to itself.
        """
        hubs: Tuple[Location, ...] = await self.caches.cached_request(
            {"type": "nearby_hubs", "location": location.id},
            lambda: self._hubs_uncached(location),
            ttl_seconds=self.config.nearby_ttl_seconds,
            namespace=LOCATION,
        )
        return list(hubs)

    async def _hubs_uncached(self, location: Location) -> Tuple[Location, ...]:
        if location.kind.is_hub:
            return (location,)
        city = location.short_name
        hubs = [hub for hub in self.repository.list_hubs() if city in hub.name.lower()]
        return tuple(hubs[: self.config.max_hubs])

    async def resolve_by_id(self, location_id: str) -> Optional[Location]:
        """Find a location by id, searching for it when it is not indexed."""
        location = self._lookup(location_id)
        if location is not None:
            return location

        wanted = location_id.lower()
        for candidate in await self.search(location_id):
            if candidate.id.lower() == wanted:
                self._remember([candidate])
                return candidate

        self._logger.debug("Location id not found", extra={"location_id": location_id})
        return None
