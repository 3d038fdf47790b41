"""Multi-modal trip router.

Given an origin, a destination and a departure date, the router picks
the transport modes worth querying, gathers candidate segments from
flight, train, bus and walking providers concurrently, and assembles
direct and one-transfer journeys ranked by price.

Typical use:

    from triprouter.container import Container
    from triprouter.services import RoutingEngine

    engine = Container.create_default().resolve(RoutingEngine)
    journeys = await engine.find_routes("nyc", "la", "2025-06-01")
"""

__version__ = "1.0.0"
