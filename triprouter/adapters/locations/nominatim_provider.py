"""Nominatim place search adapter.

Live free-text place search through OpenStreetMap's Nominatim service,
wrapped with geopy's rate limiter. geopy is synchronous, so lookups run
in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from geopy.exc import GeopyError
from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import Nominatim

from ...config import GeocodingConfig, get_config
from ...domain.errors import ProviderFailure
from ...domain.models import Coordinates, Location, LocationKind

PROVIDER_NAME = "nominatim"


def kind_from_osm(raw: Dict[str, Any]) -> LocationKind:
    """Map an OSM class/type pair onto a LocationKind."""
    osm_class = raw.get("class") or raw.get("category") or ""
    osm_type = raw.get("type") or ""
    if osm_type == "aerodrome":
        return LocationKind.AIRPORT
    if osm_type == "bus_station" or (osm_class == "highway" and osm_type == "bus_stop"):
        return LocationKind.BUS_STATION
    if osm_class == "railway" and osm_type in ("station", "halt"):
        return LocationKind.TRAIN_STATION
    return LocationKind.CITY


@dataclass
class NominatimLocationProvider:
    """Nominatim search adapter implementing LocationSearchPort.

    Attributes:
        config: Geocoding configuration
    """

    config: GeocodingConfig = field(default_factory=lambda: get_config().geocoding)

    _geolocator: Optional[Nominatim] = field(default=None, repr=False)
    _geocode_fn: Optional[Any] = field(default=None, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _get_geocoder(self) -> Any:
        """Get or initialize the geocoder with rate limiting."""
        if self._geocode_fn is not None:
            return self._geocode_fn

        self._logger.debug(
            "Initializing Nominatim geocoder",
            extra={
                "user_agent": self.config.user_agent,
                "timeout": self.config.timeout_seconds,
            },
        )

        self._geolocator = Nominatim(
            user_agent=self.config.user_agent,
            timeout=self.config.timeout_seconds,
        )
        self._geocode_fn = RateLimiter(
            self._geolocator.geocode,
            min_delay_seconds=self.config.rate_limit_delay,
            max_retries=self.config.max_retries,
            error_wait_seconds=self.config.error_wait_seconds,
            swallow_exceptions=False,
        )
        return self._geocode_fn

    async def search(self, query: str) -> Sequence[Location]:
        """Search places matching ``query``.

        Raises:
            ProviderFailure: Nominatim could not be reached.
        """
        return await asyncio.to_thread(self._search_sync, query)

    def _search_sync(self, query: str) -> List[Location]:
        try:
            results = self._get_geocoder()(
                query,
                exactly_one=False,
                limit=self.config.max_results,
                language=self.config.language,
                addressdetails=True,
            )
        except GeopyError as e:
            self._logger.warning(
                "Nominatim search failed",
                extra={"query": query, "error": str(e)},
            )
            raise ProviderFailure(
                f"Nominatim search failed for '{query}'",
                provider=PROVIDER_NAME,
                cause=e,
            )

        locations = [self._to_location(result) for result in results or []]
        self._logger.debug(
            "Nominatim search done",
            extra={"query": query, "results": len(locations)},
        )
        return locations

    def _to_location(self, result: Any) -> Location:
        raw = result.raw
        osm_type = str(raw.get("osm_type", "node"))
        osm_id = str(raw.get("osm_id", raw.get("place_id", "")))
        address = raw.get("address", {})

        name = raw.get("name") or str(result.address).split(",")[0]
        city = address.get("city") or address.get("town") or address.get("village")
        kind = kind_from_osm(raw)
        if kind.is_hub and city and city.lower() not in name.lower():
            # Hub names carry their city so nearby-hub matching can find them.
            name = f"{name}, {city}"
        elif kind is LocationKind.CITY and address.get("country_code"):
            name = f"{name}, {address['country_code'].upper()}"

        return Location(
            id=f"osm-{osm_type[:1]}{osm_id}",
            name=name,
            kind=kind,
            coordinates=Coordinates(lat=float(result.latitude), lng=float(result.longitude)),
            provider_codes={PROVIDER_NAME: f"{osm_type}/{osm_id}"},
        )
