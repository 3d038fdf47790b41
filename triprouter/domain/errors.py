"""Typed domain errors for the trip router.

All errors inherit from TripRouterError and can optionally wrap a root
cause exception for debugging.

Only InvalidEndpoint and InvalidRequest are meant to cross the routing
engine boundary. RateLimitTimeout and ProviderFailure are raised inside
segment providers and converted there into degraded results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class TripRouterError(Exception):
    """Base error for the trip router domain.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class InvalidEndpoint(TripRouterError):
    """Origin or destination id does not resolve to a known location.

    Attributes:
        endpoint_id: The id that could not be resolved
    """

    endpoint_id: str = ""


@dataclass
class InvalidRequest(TripRouterError):
    """A routing request carries malformed input (date, filters).

    Attributes:
        field_name: Name of the offending request field
    """

    field_name: str = ""


@dataclass
class RateLimitTimeout(TripRouterError):
    """A caller waited too long in a rate limiter queue.

    Attributes:
        service: Rate-limited service identifier
        waited_seconds: How long the caller was queued
    """

    service: str = ""
    waited_seconds: float = 0.0


@dataclass
class ProviderFailure(TripRouterError):
    """An upstream provider could not be reached or answered badly.

    Attributes:
        provider: Name of the failing provider
        status_code: HTTP status code when the upstream answered
    """

    provider: str = ""
    status_code: Optional[int] = None


@dataclass
class ConfigurationError(TripRouterError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: Name of the problematic setting
        expected_type: Expected type or format
    """

    setting_name: str = ""
    expected_type: Optional[str] = None
