"""Journey assembly - pure functions over collected segments.

Nothing here performs I/O. Given the segments gathered for a request,
these functions pick the transport modes worth querying, build direct
and one-transfer journeys that satisfy the request filters, and rank
them by price.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Collection, Iterable, List, Optional, Sequence

from ..config import RoutingConfig
from ..domain.models import Journey, Location, TransportMode, TransportSegment

MODE_ORDER = (TransportMode.WALK, TransportMode.BUS, TransportMode.TRAIN, TransportMode.FLIGHT)


def mode_applies(
    mode: TransportMode, distance_km: Optional[float], config: RoutingConfig
) -> bool:
    """Whether ``mode`` is worth querying over ``distance_km``.

    Unknown distances admit every mode. Boundaries are inclusive for the
    upper limits; flights need more than the bus limit.
    """
    if distance_km is None:
        return True
    if mode is TransportMode.WALK:
        return distance_km <= config.walking_max_km
    if mode is TransportMode.BUS:
        return distance_km <= config.bus_max_km
    if mode is TransportMode.TRAIN:
        return distance_km <= config.train_max_km
    return distance_km > config.bus_max_km


def select_modes(distance_km: Optional[float], config: RoutingConfig) -> List[TransportMode]:
    return [mode for mode in MODE_ORDER if mode_applies(mode, distance_km, config)]


def calculate_transfer_time(
    arrival: Location, departure: Location, config: RoutingConfig
) -> int:
    """Minimum connection time in minutes between two locations.

    Same location needs none; places that share a name (an airport and
    its city) need the same-city allowance; anything else the default.
    """
    if arrival.id == departure.id:
        return 0
    if arrival.name in departure.name or departure.name in arrival.name:
        return config.same_city_transfer_minutes
    return config.default_transfer_minutes


def within_limits(
    price: Decimal,
    duration_minutes: float,
    max_price: Optional[float] = None,
    max_duration_hours: Optional[float] = None,
) -> bool:
    """Check a journey against the optional price and duration caps."""
    if max_duration_hours is not None and duration_minutes > max_duration_hours * 60:
        return False
    if max_price is not None and price > Decimal(str(max_price)):
        return False
    return True


def build_direct_journeys(
    segments: Iterable[TransportSegment],
    origin_ids: Collection[str],
    destination_ids: Collection[str],
    max_price: Optional[float] = None,
    max_duration_hours: Optional[float] = None,
) -> List[Journey]:
    journeys = []
    for segment in segments:
        if segment.origin.id not in origin_ids or segment.destination.id not in destination_ids:
            continue
        journey = Journey.direct(segment)
        if within_limits(
            journey.total_price, journey.total_duration_minutes, max_price, max_duration_hours
        ):
            journeys.append(journey)
    return journeys


def build_transfer_journeys(
    segments: Sequence[TransportSegment],
    destination_ids: Collection[str],
    config: RoutingConfig,
    max_price: Optional[float] = None,
    max_duration_hours: Optional[float] = None,
) -> List[Journey]:
    """Connect pairs of segments through a shared location.

    At most ``config.max_connection_checks`` ordered pairs are examined,
    in iteration order, so results near the cap depend on segment order.
    """
    journeys: List[Journey] = []
    budget = config.max_connection_checks
    checked = 0

    for first in segments:
        for second in segments:
            if checked >= budget:
                return journeys
            checked += 1

            if first.destination.id != second.origin.id:
                continue
            if second.destination.id not in destination_ids:
                continue

            required = calculate_transfer_time(first.destination, second.origin, config)
            gap_minutes = (second.departure_time - first.arrival_time).total_seconds() / 60
            if gap_minutes < required:
                continue

            journey = Journey.connecting(first, second)
            if within_limits(
                journey.total_price,
                journey.total_duration_minutes,
                max_price,
                max_duration_hours,
            ):
                journeys.append(journey)
    return journeys


def sort_journeys(journeys: Iterable[Journey]) -> List[Journey]:
    """Stable ascending sort by total price."""
    return sorted(journeys, key=lambda journey: journey.total_price)
