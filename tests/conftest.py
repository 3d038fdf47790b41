"""Shared fixtures for the trip router test-suite."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, List, Optional

import pytest

from triprouter.adapters.cache import InMemoryCache, NullCache, ResultCaches
from triprouter.config import reset_config
from triprouter.domain.models import (
    Coordinates,
    Location,
    LocationKind,
    ProviderResult,
    TransportMode,
    TransportSegment,
)

DEPARTURE = datetime(2025, 6, 1, 8, 0, tzinfo=timezone.utc)


def make_location(
    location_id: str,
    name: str,
    kind: LocationKind = LocationKind.CITY,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    **codes: str,
) -> Location:
    coordinates = Coordinates(lat=lat, lng=lng) if lat is not None and lng is not None else None
    return Location(
        id=location_id,
        name=name,
        kind=kind,
        coordinates=coordinates,
        provider_codes=codes,
    )


def make_segment(
    segment_id: str,
    origin: Location,
    destination: Location,
    depart_after_hours: float = 0,
    hours: float = 2,
    price: float = 100,
    mode: TransportMode = TransportMode.TRAIN,
) -> TransportSegment:
    departure = DEPARTURE + timedelta(hours=depart_after_hours)
    return TransportSegment(
        id=segment_id,
        origin=origin,
        destination=destination,
        departure_time=departure,
        arrival_time=departure + timedelta(hours=hours),
        price=Decimal(str(price)),
        mode=mode,
        provider="Test Carrier",
    )


@dataclass
class FakeClock:
    """Manually advanced time source."""

    now: float = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class FakeProvider:
    """Segment provider returning canned segments and recording calls."""

    mode: TransportMode
    respond: Optional[Callable[[Location, Location, datetime], List[TransportSegment]]] = None
    degraded: bool = False
    calls: List[tuple] = field(default_factory=list)

    async def search(
        self, origin: Location, destination: Location, departure: datetime
    ) -> ProviderResult:
        self.calls.append((origin.id, destination.id))
        segments = self.respond(origin, destination, departure) if self.respond else []
        if self.degraded:
            return ProviderResult.degraded(segments, "upstream down")
        return ProviderResult.ok(segments)


@pytest.fixture(autouse=True)
def fresh_config():
    """Make every test read configuration from a clean slate."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def null_caches():
    return ResultCaches.from_caches(api=NullCache(), location=NullCache(), route=NullCache())


@pytest.fixture
def memory_caches():
    return ResultCaches.from_caches(
        api=InMemoryCache(name="api", max_size=200),
        location=InMemoryCache(name="location", max_size=100),
        route=InMemoryCache(name="route", max_size=50),
    )


@pytest.fixture
def nyc():
    return make_location("nyc", "New York, NY", lat=40.7128, lng=-74.0060,
                         skyscanner="NYC", skyscanner_entity="27537542")


@pytest.fixture
def jfk():
    return make_location("jfk", "JFK Airport, New York", LocationKind.AIRPORT,
                         lat=40.6413, lng=-73.7781,
                         skyscanner="JFK", skyscanner_entity="95673298")


@pytest.fixture
def lga():
    return make_location("lga", "LaGuardia Airport, New York", LocationKind.AIRPORT,
                         lat=40.7769, lng=-73.8740)


@pytest.fixture
def la():
    return make_location("la", "Los Angeles, CA", lat=34.0522, lng=-118.2437)


@pytest.fixture
def lax():
    return make_location("lax", "Los Angeles International Airport", LocationKind.AIRPORT,
                         lat=33.9416, lng=-118.4085,
                         skyscanner="LAX", skyscanner_entity="95673784")


@pytest.fixture
def nowhere():
    """A place without coordinates."""
    return make_location("nowhere", "Nowhere")
