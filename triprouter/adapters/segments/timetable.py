"""Train and bus timetable adapters.

Both talk to an optional JSON timetable service:

    GET {base_url}/journeys?origin=<id>&destination=<id>&date=YYYY-MM-DD
    -> {"journeys": [{"departure", "arrival", "price", "operator", "booking_url"}]}

Without a configured base URL they serve synthetic timetables.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, ClassVar, List, Optional

from ...dates import format_api_date
from ...domain.errors import ProviderFailure
from ...domain.models import Location, TransportMode, TransportSegment
from .base import BaseSegmentProvider, parse_timestamp, to_price


@dataclass
class TimetableProvider(BaseSegmentProvider):
    """Segments from a JSON timetable service.

    Subclasses pick the mode, the service name, the configured base URL
    and the shape of their synthetic journey.
    """

    synthetic_hours: ClassVar[int]
    synthetic_base_price: ClassVar[int]
    synthetic_price_spread: ClassVar[int]
    synthetic_operator: ClassVar[str]

    @property
    def base_url(self) -> Optional[str]:
        raise NotImplementedError

    async def _fetch(self, origin: Location, destination: Location, departure: datetime) -> Any:
        if not self.base_url:
            raise ProviderFailure(
                f"No timetable service configured for {self.service}",
                provider=self.service,
            )
        return await self._get_json(
            f"{self.base_url.rstrip('/')}/journeys",
            params={
                "origin": origin.id,
                "destination": destination.id,
                "date": format_api_date(departure),
            },
        )

    def _parse(
        self, payload: Any, origin: Location, destination: Location, departure: datetime
    ) -> List[TransportSegment]:
        segments = []
        for index, journey in enumerate(payload["journeys"]):
            leg_departure = parse_timestamp(journey["departure"])
            segments.append(
                TransportSegment(
                    id=self._segment_id(origin, destination, leg_departure, index),
                    origin=origin,
                    destination=destination,
                    departure_time=leg_departure,
                    arrival_time=parse_timestamp(journey["arrival"]),
                    price=to_price(journey["price"]),
                    mode=self.mode,
                    provider=journey.get("operator") or self.synthetic_operator,
                    booking_link=journey.get("booking_url") or "",
                )
            )
        return segments

    def _synthetic(
        self, origin: Location, destination: Location, departure: datetime
    ) -> List[TransportSegment]:
        price = self.synthetic_base_price + self.rng.randint(0, self.synthetic_price_spread - 1)
        return [
            TransportSegment(
                id=self._segment_id(origin, destination, departure, 0),
                origin=origin,
                destination=destination,
                departure_time=departure,
                arrival_time=departure + timedelta(hours=self.synthetic_hours),
                price=to_price(price),
                mode=self.mode,
                provider=self.synthetic_operator,
                booking_link="https://example.com/book",
            )
        ]


@dataclass
class TrainTimetableProvider(TimetableProvider):
    mode = TransportMode.TRAIN
    service = "rail"

    synthetic_hours = 5
    synthetic_base_price = 79
    synthetic_price_spread = 40
    synthetic_operator = "Rail Express"

    @property
    def ttl_seconds(self) -> float:
        return self.config.train_ttl_seconds

    @property
    def base_url(self) -> Optional[str]:
        return self.config.rail_base_url


@dataclass
class BusTimetableProvider(TimetableProvider):
    mode = TransportMode.BUS
    service = "coach"

    synthetic_hours = 8
    synthetic_base_price = 35
    synthetic_price_spread = 25
    synthetic_operator = "Budget Bus Lines"

    @property
    def ttl_seconds(self) -> float:
        return self.config.bus_ttl_seconds

    @property
    def base_url(self) -> Optional[str]:
        return self.config.coach_base_url
