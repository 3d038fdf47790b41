"""Location ports - Abstractions for place search and the known hub dataset."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import Location


class LocationSearchPort(Protocol):
    """Port for free-text place search.

    Implementations:
    - adapters/locations/nominatim_provider.py (NominatimLocationProvider)
    - adapters/locations/csv_repository.py (CSVLocationRepository)

    Implementations may raise on upstream failure; the location resolver
    absorbs those errors.
    """

    async def search(self, query: str) -> Sequence[Location]:
        """Search places whose name matches the query.

        Args:
            query: Free text such as "new york" or "jfk".

        Returns:
            Matching locations, best match first.
        """
        ...


class LocationRepositoryPort(LocationSearchPort, Protocol):
    """Port for the bounded dataset of well-known places and hubs.

    The dataset is searchable itself, which makes it the fallback when
    live place search is disabled or failing.

    Implementation: adapters/locations/csv_repository.py
    """

    def list_locations(self) -> Sequence[Location]:
        """List every known location."""
        ...

    def get_location(self, location_id: str) -> Optional[Location]:
        """Get a known location by id, or None."""
        ...

    def list_hubs(self) -> Sequence[Location]:
        """List the known airports and stations."""
        ...
