"""Domain layer - Core routing models and errors.

This module contains immutable domain models and typed errors
used throughout the application. No external dependencies.
"""

from .errors import (
    ConfigurationError,
    InvalidEndpoint,
    InvalidRequest,
    ProviderFailure,
    RateLimitTimeout,
    TripRouterError,
)
from .models import (
    Coordinates,
    Journey,
    Location,
    LocationKind,
    ProviderResult,
    ResultStatus,
    TransportMode,
    TransportSegment,
)

__all__ = [
    # Models
    "Coordinates",
    "Location",
    "LocationKind",
    "TransportMode",
    "TransportSegment",
    "Journey",
    "ProviderResult",
    "ResultStatus",
    # Errors
    "TripRouterError",
    "InvalidEndpoint",
    "InvalidRequest",
    "RateLimitTimeout",
    "ProviderFailure",
    "ConfigurationError",
]
