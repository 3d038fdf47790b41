"""Immutable domain models for the trip router.

All models are frozen dataclasses with slots. They have no external
dependencies and represent the core concepts of the routing engine:
places, priced point-to-point segments and assembled journeys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class LocationKind(Enum):
    """Kind of place a Location represents."""

    AIRPORT = "airport"
    TRAIN_STATION = "train_station"
    BUS_STATION = "bus_station"
    CITY = "city"

    @property
    def is_hub(self) -> bool:
        """Airports and stations are boarding hubs, cities are not."""
        return self is not LocationKind.CITY


class TransportMode(Enum):
    """Transport modes the engine knows how to query."""

    FLIGHT = "flight"
    TRAIN = "train"
    BUS = "bus"
    WALK = "walk"


class ResultStatus(Enum):
    """Whether a provider answer came from a live upstream or a fallback."""

    LIVE = "live"
    DEGRADED = "degraded"


@dataclass(frozen=True, slots=True)
class Coordinates:
    """GPS coordinates of a place."""

    lat: float
    lng: float

    def __post_init__(self) -> None:
        """Validate coordinate ranges."""
        if not -90 <= self.lat <= 90:
            raise ValueError(f"Latitude must be between -90 and 90, got {self.lat}")
        if not -180 <= self.lng <= 180:
            raise ValueError(
                f"Longitude must be between -180 and 180, got {self.lng}"
            )


@dataclass(frozen=True, slots=True)
class Location:
    """A place a journey can start, end or connect at.

    Attributes:
        id: Stable identifier (e.g. 'nyc', 'jfk')
        name: Human-readable name, city first for hubs ("JFK Airport, New York")
        kind: Airport, station or city
        coordinates: Optional GPS coordinates
        provider_codes: Opaque provider identifiers keyed by provider name
    """

    id: str
    name: str
    kind: LocationKind
    coordinates: Optional[Coordinates] = None
    provider_codes: Mapping[str, str] = field(
        default_factory=dict, compare=False, hash=False
    )

    @property
    def short_name(self) -> str:
        """Lower-cased name up to the first comma ("new york")."""
        return self.name.split(",")[0].strip().lower()

    def provider_code(self, provider: str) -> Optional[str]:
        """Return the code this location has for a provider, if any."""
        return self.provider_codes.get(provider)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.kind.value,
        }
        if self.coordinates is not None:
            payload["coordinates"] = {
                "lat": self.coordinates.lat,
                "lng": self.coordinates.lng,
            }
        if self.provider_codes:
            payload["providerCodes"] = dict(self.provider_codes)
        return payload


@dataclass(frozen=True, slots=True)
class TransportSegment:
    """A priced point-to-point leg offered by a single provider.

    Attributes:
        id: Unique segment identifier
        origin: Boarding location
        destination: Alighting location
        departure_time: Timezone-aware departure timestamp
        arrival_time: Timezone-aware arrival timestamp
        price: Fare, never negative
        mode: Transport mode
        provider: Carrier or operator name
        booking_link: Where the segment can be booked (may be empty)
    """

    id: str
    origin: Location
    destination: Location
    departure_time: datetime
    arrival_time: datetime
    price: Decimal
    mode: TransportMode
    provider: str
    booking_link: str = ""

    def __post_init__(self) -> None:
        if self.arrival_time <= self.departure_time:
            raise ValueError(
                f"Segment {self.id} arrives before it departs "
                f"({self.arrival_time.isoformat()} <= {self.departure_time.isoformat()})"
            )
        if self.price < 0:
            raise ValueError(f"Segment {self.id} has a negative price: {self.price}")

    @property
    def duration_minutes(self) -> float:
        """Return the travel time of this segment in minutes."""
        return (self.arrival_time - self.departure_time).total_seconds() / 60

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "origin": self.origin.to_dict(),
            "destination": self.destination.to_dict(),
            "departureTime": self.departure_time.isoformat(),
            "arrivalTime": self.arrival_time.isoformat(),
            "price": float(self.price),
            "type": self.mode.value,
            "provider": self.provider,
            "bookingLink": self.booking_link,
        }


@dataclass(frozen=True, slots=True)
class Journey:
    """A complete trip made of one segment or two connected segments.

    Journeys are built per request through ``direct`` and ``connecting``
    so the totals always agree with the segments.
    """

    id: str
    segments: tuple[TransportSegment, ...]
    total_price: Decimal
    total_duration_minutes: float
    transfer_count: int

    @classmethod
    def direct(cls, segment: TransportSegment) -> Journey:
        return cls(
            id=f"journey-{segment.id}",
            segments=(segment,),
            total_price=segment.price,
            total_duration_minutes=segment.duration_minutes,
            transfer_count=0,
        )

    @classmethod
    def connecting(cls, first: TransportSegment, second: TransportSegment) -> Journey:
        if first.destination.id != second.origin.id:
            raise ValueError(
                f"Segments {first.id} and {second.id} do not share a location"
            )
        span = second.arrival_time - first.departure_time
        return cls(
            id=f"journey-{first.id}-{second.id}",
            segments=(first, second),
            total_price=first.price + second.price,
            total_duration_minutes=span.total_seconds() / 60,
            transfer_count=1,
        )

    @property
    def departure_time(self) -> datetime:
        return self.segments[0].departure_time

    @property
    def arrival_time(self) -> datetime:
        return self.segments[-1].arrival_time

    @property
    def modes(self) -> tuple[TransportMode, ...]:
        return tuple(segment.mode for segment in self.segments)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "segments": [segment.to_dict() for segment in self.segments],
            "totalPrice": float(self.total_price),
            "totalDuration": self.total_duration_minutes,
            "transfers": self.transfer_count,
        }


@dataclass(frozen=True, slots=True)
class ProviderResult:
    """Answer of a segment provider.

    A LIVE result carries segments parsed from the upstream service.
    A DEGRADED result carries synthetic segments generated because the
    upstream failed; ``reason`` says why.

    Attributes:
        status: LIVE or DEGRADED
        segments: Segments returned by the provider
        reason: Failure description for degraded results
    """

    status: ResultStatus
    segments: tuple[TransportSegment, ...] = field(default_factory=tuple)
    reason: Optional[str] = None

    @classmethod
    def ok(cls, segments: Any = ()) -> ProviderResult:
        return cls(status=ResultStatus.LIVE, segments=tuple(segments))

    @classmethod
    def degraded(cls, segments: Any, reason: str) -> ProviderResult:
        return cls(status=ResultStatus.DEGRADED, segments=tuple(segments), reason=reason)

    @property
    def is_live(self) -> bool:
        return self.status is ResultStatus.LIVE

    @property
    def is_degraded(self) -> bool:
        return self.status is ResultStatus.DEGRADED

    @property
    def is_empty(self) -> bool:
        """Check if the provider returned no segments."""
        return len(self.segments) == 0
