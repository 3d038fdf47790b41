"""Walking segments from the HERE routing API (pedestrian mode)."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, List, Optional

from ...domain.errors import ProviderFailure
from ...domain.models import Location, TransportMode, TransportSegment
from ...geo import distance_between
from .base import BaseSegmentProvider

WALKING_SPEED_KMH = 5.0
DETOUR_FACTOR = 1.2
MIN_WALK_MINUTES = 5
MAX_WALK_MINUTES = 180
DEFAULT_WALK_MINUTES = 30


def estimated_walk_minutes(distance: Optional[float]) -> int:
    """Straight-line walking estimate with a detour allowance."""
    if distance is None:
        return DEFAULT_WALK_MINUTES
    minutes = math.ceil(distance / WALKING_SPEED_KMH * 60 * DETOUR_FACTOR)
    return max(MIN_WALK_MINUTES, min(MAX_WALK_MINUTES, minutes))


def _waypoint(location: Location) -> str:
    if location.coordinates is None:
        return location.name
    return f"{location.coordinates.lat},{location.coordinates.lng}"


@dataclass
class HereWalkingProvider(BaseSegmentProvider):
    """Always answers with exactly one walking segment."""

    mode = TransportMode.WALK
    service = "here"

    @property
    def ttl_seconds(self) -> float:
        return self.config.walk_ttl_seconds

    async def _fetch(self, origin: Location, destination: Location, departure: datetime) -> Any:
        if not self.config.here_api_key:
            raise ProviderFailure("HERE API key is not configured", provider=self.service)
        return await self._get_json(
            self.config.here_base_url,
            params={
                "transportMode": "pedestrian",
                "origin": _waypoint(origin),
                "destination": _waypoint(destination),
                "return": "summary",
                "apikey": self.config.here_api_key,
            },
        )

    def _parse(
        self, payload: Any, origin: Location, destination: Location, departure: datetime
    ) -> List[TransportSegment]:
        routes = payload.get("routes") or []
        if not routes:
            raise ProviderFailure("HERE returned no pedestrian route", provider=self.service)

        sections = routes[0].get("sections") or []
        seconds = sum(
            section.get("summary", {}).get("duration", 0)
            for section in sections
            if section.get("type", "pedestrian") == "pedestrian"
        )
        if seconds <= 0:
            raise ProviderFailure("HERE route has no walking duration", provider=self.service)

        return [self._walk(origin, destination, departure, timedelta(seconds=seconds), "Walking")]

    def _synthetic(
        self, origin: Location, destination: Location, departure: datetime
    ) -> List[TransportSegment]:
        minutes = estimated_walk_minutes(distance_between(origin, destination))
        return [
            self._walk(
                origin, destination, departure, timedelta(minutes=minutes), "Walking (Estimated)"
            )
        ]

    def _walk(
        self,
        origin: Location,
        destination: Location,
        departure: datetime,
        duration: timedelta,
        provider: str,
    ) -> TransportSegment:
        return TransportSegment(
            id=self._segment_id(origin, destination, departure, 0),
            origin=origin,
            destination=destination,
            departure_time=departure,
            arrival_time=departure + duration,
            price=Decimal("0"),
            mode=self.mode,
            provider=provider,
        )
