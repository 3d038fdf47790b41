"""Ports layer - Abstract interfaces (Protocols) for the application.

Ports define the contracts between the routing core and external
adapters. They enable dependency injection and make the system testable.
"""

from .cache import CachePort
from .locations import LocationRepositoryPort, LocationSearchPort
from .segments import SegmentProviderPort

__all__ = [
    # Cache
    "CachePort",
    # Locations
    "LocationSearchPort",
    "LocationRepositoryPort",
    # Segments
    "SegmentProviderPort",
]
