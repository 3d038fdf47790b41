"""Location adapters - Implementations of the location ports.

- CSVLocationRepository: bounded dataset of well-known places and hubs
- NominatimLocationProvider: live place search via geopy
"""

from .csv_repository import CSVLocationRepository
from .nominatim_provider import NominatimLocationProvider

__all__ = ["CSVLocationRepository", "NominatimLocationProvider"]
