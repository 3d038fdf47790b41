"""Application services - Orchestration of ports.

Services contain the routing logic and coordinate between ports.
They depend only on port interfaces, not concrete adapters.
"""

from .location_resolver import LocationResolver
from .routing_engine import RouteSearch, RoutingEngine

__all__ = ["LocationResolver", "RouteSearch", "RoutingEngine"]
