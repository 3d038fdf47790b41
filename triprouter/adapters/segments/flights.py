"""Skyscanner flight search adapter (RapidAPI one-way listing)."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from ...dates import format_api_date
from ...domain.errors import ProviderFailure
from ...domain.models import Location, ProviderResult, TransportMode, TransportSegment
from ...geo import distance_between
from .base import BaseSegmentProvider, parse_timestamp, to_price

# (skyId, entityId) for well-known cities, keyed by lower-cased short name
CITY_CODES: Dict[str, Tuple[str, str]] = {
    "new york": ("NYC", "27537542"),
    "jfk": ("JFK", "95673298"),
    "boston": ("BOS", "27538629"),
    "chicago": ("CHI", "27535663"),
    "san francisco": ("SFO", "27544026"),
    "los angeles": ("LAX", "27544850"),
    "london": ("LON", "27544069"),
    "paris": ("PAR", "27539733"),
    "ithaca": ("ITH", "27545475"),
    "athens": ("ATH", "27539604"),
}
DEFAULT_CODES = CITY_CODES["new york"]

DEFAULT_FLIGHT_HOURS = 2
DEFAULT_BOOKING_LINK = "https://www.skyscanner.com"
SYNTHETIC_BOOKING_LINK = "https://example.com/book"


def location_codes(location: Location) -> Tuple[str, str]:
    """Resolve the Skyscanner (skyId, entityId) pair for a location."""
    sky_id = location.provider_code("skyscanner")
    entity_id = location.provider_code("skyscanner_entity")
    if sky_id and entity_id:
        return sky_id, entity_id
    return CITY_CODES.get(location.short_name, DEFAULT_CODES)


def estimated_flight_hours(distance: Optional[float]) -> int:
    """500 km/h cruising plus an hour on the ground, at least one hour."""
    if distance is None:
        return DEFAULT_FLIGHT_HOURS
    return max(1, math.floor(distance / 500 + 0.5) + 1)


@dataclass
class SkyscannerFlightProvider(BaseSegmentProvider):
    """Flight segments from Skyscanner, with synthetic fallback.

    Hops shorter than ``min_distance_km`` never reach the upstream and
    return an empty live result.
    """

    mode = TransportMode.FLIGHT
    service = "skyscanner"

    min_distance_km: float = 100.0

    @property
    def ttl_seconds(self) -> float:
        return self.config.flight_ttl_seconds

    def _precheck(self, origin: Location, destination: Location) -> Optional[ProviderResult]:
        distance = distance_between(origin, destination)
        if distance is not None and distance < self.min_distance_km:
            self._logger.debug(
                "Skipping flight search for short hop",
                extra={
                    "origin": origin.id,
                    "destination": destination.id,
                    "distance_km": round(distance, 1),
                },
            )
            return ProviderResult.ok()
        return None

    async def _fetch(self, origin: Location, destination: Location, departure: datetime) -> Any:
        if not self.config.skyscanner_api_key:
            raise ProviderFailure("Skyscanner API key is not configured", provider=self.service)

        origin_sky, origin_entity = location_codes(origin)
        destination_sky, destination_entity = location_codes(destination)
        self._logger.info(
            "Searching flights",
            extra={
                "origin": origin_sky,
                "destination": destination_sky,
                "date": format_api_date(departure),
            },
        )
        return await self._get_json(
            f"https://{self.config.skyscanner_host}/flights/one-way/list",
            params={
                "origin": origin_sky,
                "originId": origin_entity,
                "destination": destination_sky,
                "destinationId": destination_entity,
                "date": format_api_date(departure),
                "adults": "1",
                "cabinClass": "economy",
                "currency": "USD",
                "locale": "en-US",
                "market": "US",
            },
            headers={
                "X-RapidAPI-Host": self.config.skyscanner_host,
                "X-RapidAPI-Key": self.config.skyscanner_api_key,
            },
        )

    def _parse(
        self, payload: Any, origin: Location, destination: Location, departure: datetime
    ) -> List[TransportSegment]:
        itineraries = payload["content"]["results"]["itineraries"]
        if isinstance(itineraries, dict):
            itineraries = list(itineraries.values())

        segments: List[TransportSegment] = []
        for index, itinerary in enumerate(itineraries):
            legs = itinerary.get("legs") or []
            pricing_options = itinerary.get("pricingOptions") or []
            if not legs or not pricing_options:
                continue
            leg, pricing = legs[0], pricing_options[0]

            carriers = leg.get("carriers") or []
            items = pricing.get("items") or []
            leg_departure = parse_timestamp(leg["departure"])
            segments.append(
                TransportSegment(
                    id=self._segment_id(origin, destination, leg_departure, index),
                    origin=origin,
                    destination=destination,
                    departure_time=leg_departure,
                    arrival_time=parse_timestamp(leg["arrival"]),
                    price=to_price(pricing["price"]["amount"]),
                    mode=self.mode,
                    provider=carriers[0]["name"] if carriers else "Unknown Airline",
                    booking_link=items[0].get("deepLink", DEFAULT_BOOKING_LINK)
                    if items
                    else DEFAULT_BOOKING_LINK,
                )
            )
        return segments

    def _on_empty(
        self, origin: Location, destination: Location, departure: datetime
    ) -> ProviderResult:
        return self._degrade(origin, destination, departure, reason="no itineraries returned")

    def _synthetic(
        self, origin: Location, destination: Location, departure: datetime
    ) -> List[TransportSegment]:
        distance = distance_between(origin, destination)
        if distance is not None and distance < self.min_distance_km:
            return []

        duration = timedelta(hours=estimated_flight_hours(distance))
        later = departure + timedelta(hours=6)
        return [
            TransportSegment(
                id=self._segment_id(origin, destination, departure, 0),
                origin=origin,
                destination=destination,
                departure_time=departure,
                arrival_time=departure + duration,
                price=to_price(199 + self.rng.randint(0, 199)),
                mode=self.mode,
                provider="Mock Airlines",
                booking_link=SYNTHETIC_BOOKING_LINK,
            ),
            TransportSegment(
                id=self._segment_id(origin, destination, later, 1),
                origin=origin,
                destination=destination,
                departure_time=later,
                arrival_time=later + duration,
                price=to_price(149 + self.rng.randint(0, 149)),
                mode=self.mode,
                provider="Budget Air",
                booking_link=SYNTHETIC_BOOKING_LINK,
            ),
        ]
