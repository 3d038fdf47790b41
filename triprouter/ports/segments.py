"""Segment provider port - Abstraction for per-mode segment sources."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from datetime import datetime

    from ..domain.models import Location, ProviderResult, TransportMode


class SegmentProviderPort(Protocol):
    """Port for transport segment providers.

    Implementations:
    - adapters/segments/flights.py (SkyscannerFlightProvider)
    - adapters/segments/timetable.py (TimetableProvider for trains and buses)
    - adapters/segments/walking.py (HereWalkingProvider)

    Providers never raise for ordinary "no result" conditions or upstream
    failures. They return a ProviderResult, degraded with synthetic
    segments when the upstream could not be used.
    """

    @property
    def mode(self) -> TransportMode:
        """Transport mode of the segments this provider returns."""
        ...

    async def search(
        self,
        origin: Location,
        destination: Location,
        departure: datetime,
    ) -> ProviderResult:
        """Find segments between two locations on a departure date.

        Args:
            origin: Boarding location.
            destination: Alighting location.
            departure: Requested departure (aware UTC datetime).

        Returns:
            ProviderResult with live or synthetic segments.
        """
        ...
