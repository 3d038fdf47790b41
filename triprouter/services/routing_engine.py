"""Routing engine service - Main orchestrator.

Runs the route search pipeline for one request:

1. Parse the departure date and resolve both endpoints
2. Measure the straight-line distance and select transport modes
3. Expand each endpoint into nearby hubs
4. Query every eligible provider concurrently
5. Assemble direct and one-transfer journeys, filter and sort by price
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..config import RoutingConfig, get_config
from ..dates import parse_departure
from ..domain.errors import InvalidEndpoint, InvalidRequest
from ..domain.models import Journey, Location, ProviderResult, TransportMode
from ..geo import distance_between
from ..ports.segments import SegmentProviderPort
from .assembly import (
    build_direct_journeys,
    build_transfer_journeys,
    mode_applies,
    select_modes,
    sort_journeys,
)
from .location_resolver import LocationResolver

ProviderCall = Tuple[TransportMode, Location, Location]


def _check_filter(field_name: str, value: Optional[float]) -> None:
    if value is None:
        return
    if not math.isfinite(value) or value < 0:
        raise InvalidRequest(
            f"{field_name} must be a finite, non-negative number", field_name=field_name
        )


@dataclass(frozen=True, slots=True)
class RouteSearch:
    """Outcome of a route search with the decisions that produced it.

    Attributes:
        origin: Resolved origin
        destination: Resolved destination
        departure: Parsed departure (aware UTC)
        distance_km: Straight-line distance, None when unknown
        modes: Transport modes selected for the distance
        origin_hub_ids: Boarding locations considered on the origin side
        destination_hub_ids: Alighting locations considered on the destination side
        live_calls: Provider calls answered by a live upstream
        degraded_calls: Provider calls answered with synthetic data
        journeys: Journeys sorted by price
    """

    origin: Location
    destination: Location
    departure: datetime
    distance_km: Optional[float]
    modes: Tuple[TransportMode, ...]
    origin_hub_ids: Tuple[str, ...]
    destination_hub_ids: Tuple[str, ...]
    live_calls: int
    degraded_calls: int
    journeys: Tuple[Journey, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "origin": self.origin.to_dict(),
            "destination": self.destination.to_dict(),
            "departureTime": self.departure.isoformat(),
            "distanceKm": self.distance_km,
            "modes": [mode.value for mode in self.modes],
            "originHubs": list(self.origin_hub_ids),
            "destinationHubs": list(self.destination_hub_ids),
            "liveCalls": self.live_calls,
            "degradedCalls": self.degraded_calls,
            "routes": [journey.to_dict() for journey in self.journeys],
        }


@dataclass
class RoutingEngine:
    """Multi-modal route search.

    Attributes:
        resolver: Resolves endpoint ids and nearby hubs
        providers: Segment provider per transport mode
        config: Distance thresholds, hub and connection limits
    """

    resolver: LocationResolver
    providers: Mapping[TransportMode, SegmentProviderPort]
    config: RoutingConfig = field(default_factory=lambda: get_config().routing)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    async def find_routes(
        self,
        origin_id: str,
        destination_id: str,
        departure_date: Union[str, date, datetime],
        max_price: Optional[float] = None,
        max_duration: Optional[float] = None,
    ) -> List[Journey]:
        """Find journeys between two known locations.

        Args:
            origin_id: Id of the origin location.
            destination_id: Id of the destination location.
            departure_date: Departure date (ISO 8601 or natural language).
            max_price: Optional price cap for a whole journey.
            max_duration: Optional duration cap in hours.

        Returns:
            Journeys sorted by ascending price, possibly empty.

        Raises:
            InvalidRequest: If the date or filters are malformed.
            InvalidEndpoint: If either id does not resolve.
        """
        result = await self.search(
            origin_id, destination_id, departure_date, max_price, max_duration
        )
        return list(result.journeys)

    async def search(
        self,
        origin_id: str,
        destination_id: str,
        departure_date: Union[str, date, datetime],
        max_price: Optional[float] = None,
        max_duration: Optional[float] = None,
    ) -> RouteSearch:
        """Run the full pipeline and return the journeys with a summary."""
        departure = parse_departure(departure_date)
        if departure is None:
            raise InvalidRequest(
                f"Unparseable departure date: {departure_date!r}",
                field_name="departureDate",
            )
        _check_filter("maxPrice", max_price)
        _check_filter("maxDuration", max_duration)

        origin = await self._resolve_endpoint(origin_id)
        destination = await self._resolve_endpoint(destination_id)

        distance = distance_between(origin, destination)
        modes = select_modes(distance, self.config)
        self._logger.info(
            "Route search started",
            extra={
                "origin": origin.id,
                "destination": destination.id,
                "distance_km": round(distance, 1) if distance is not None else None,
                "modes": [mode.value for mode in modes],
            },
        )

        origin_hubs = await self._expand(origin)
        destination_hubs = await self._expand(destination)

        calls = self._plan_calls(origin, destination, origin_hubs, destination_hubs, modes)
        results = await self._gather(calls, departure)
        segments = [segment for result in results for segment in result.segments]

        origin_ids = {location.id for location in origin_hubs}
        destination_ids = {location.id for location in destination_hubs}
        journeys = sort_journeys(
            build_direct_journeys(segments, origin_ids, destination_ids, max_price, max_duration)
            + build_transfer_journeys(
                segments, destination_ids, self.config, max_price, max_duration
            )
        )

        live = sum(1 for result in results if result.is_live)
        degraded = sum(1 for result in results if result.is_degraded)
        self._logger.info(
            "Route search finished",
            extra={
                "origin": origin.id,
                "destination": destination.id,
                "segments": len(segments),
                "journeys": len(journeys),
                "live_calls": live,
                "degraded_calls": degraded,
            },
        )

        return RouteSearch(
            origin=origin,
            destination=destination,
            departure=departure,
            distance_km=distance,
            modes=tuple(modes),
            origin_hub_ids=tuple(location.id for location in origin_hubs),
            destination_hub_ids=tuple(location.id for location in destination_hubs),
            live_calls=live,
            degraded_calls=degraded,
            journeys=tuple(journeys),
        )

    async def _resolve_endpoint(self, location_id: str) -> Location:
        location = await self.resolver.resolve_by_id(location_id)
        if location is None:
            raise InvalidEndpoint(
                f"Invalid origin or destination: {location_id}",
                endpoint_id=location_id,
            )
        return location

    async def _expand(self, location: Location) -> List[Location]:
        """The endpoint followed by its nearby hubs, unique by id."""
        candidates = [location, *await self.resolver.hubs_near(location)]
        seen = set()
        expanded = []
        for candidate in candidates:
            if candidate.id in seen:
                continue
            seen.add(candidate.id)
            expanded.append(candidate)
        return expanded[: self.config.max_locations_per_side]

    def _plan_calls(
        self,
        origin: Location,
        destination: Location,
        origin_hubs: Sequence[Location],
        destination_hubs: Sequence[Location],
        modes: Sequence[TransportMode],
    ) -> List[ProviderCall]:
        calls: List[ProviderCall] = []
        if TransportMode.WALK in modes:
            calls.append((TransportMode.WALK, origin, destination))

        for hub_from in origin_hubs:
            for hub_to in destination_hubs:
                if hub_from.id == hub_to.id:
                    continue
                pair_distance = distance_between(hub_from, hub_to)
                for mode in (TransportMode.FLIGHT, TransportMode.TRAIN, TransportMode.BUS):
                    if mode in modes and mode_applies(mode, pair_distance, self.config):
                        calls.append((mode, hub_from, hub_to))

        planned = [call for call in calls if call[0] in self.providers]
        for mode in {call[0] for call in calls} - set(self.providers):
            self._logger.warning("No provider registered", extra={"mode": mode.value})
        return planned

    async def _gather(
        self, calls: Sequence[ProviderCall], departure: datetime
    ) -> List[ProviderResult]:
        """Run provider calls concurrently, keeping creation order."""
        if not calls:
            return []

        tasks = [
            asyncio.ensure_future(self.providers[mode].search(hub_from, hub_to, departure))
            for mode, hub_from, hub_to in calls
        ]

        timeout = self.config.gather_timeout_seconds
        try:
            done, pending = await asyncio.wait(tasks, timeout=timeout)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

        if pending:
            self._logger.warning(
                "Provider calls timed out",
                extra={"pending": len(pending), "timeout_seconds": timeout},
            )
            await asyncio.gather(*pending, return_exceptions=True)

        # Providers absorb upstream failures; anything left is a bug.
        errors = [task.exception() for task in tasks if task in done]
        failures = [error for error in errors if error is not None]
        if failures:
            raise failures[0]
        return [task.result() for task in tasks if task in done]
