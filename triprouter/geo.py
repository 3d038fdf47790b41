"""Great-circle distances between locations."""

from __future__ import annotations

from typing import Optional

from geopy.distance import great_circle

from .domain.models import Coordinates, Location

EARTH_RADIUS_KM = 6371.0


def distance_km(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance in kilometres on a 6371 km sphere."""
    return great_circle((a.lat, a.lng), (b.lat, b.lng), radius=EARTH_RADIUS_KM).km


def distance_between(origin: Location, destination: Location) -> Optional[float]:
    """Distance between two locations, or None when either lacks coordinates."""
    if origin.coordinates is None or destination.coordinates is None:
        return None
    return distance_km(origin.coordinates, destination.coordinates)
