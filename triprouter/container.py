"""Service wiring for the trip router.

Everything with process-wide state (result caches, the rate limiter and
the location index) is built here once and handed to whoever needs it,
so tests can assemble the same graph from fakes by registering their
own factories.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from .config import AppConfig, get_config


@dataclass(frozen=True)
class _Binding:
    factory: Callable[[], Any]
    shared: bool


@dataclass
class Container:
    """Registry of factories keyed by port or service type.

        container = Container.create_default()
        engine = container.resolve(RoutingEngine)

    Shared bindings are built on first resolve and reused afterwards;
    re-registering a type drops the instance built from the old factory.

    Attributes:
        config: Configuration the default bindings are built from
    """

    config: AppConfig = field(default_factory=get_config)

    _bindings: Dict[type[Any], _Binding] = field(default_factory=dict, repr=False)
    _instances: Dict[type[Any], Any] = field(default_factory=dict, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(
        self,
        port_type: type[Any],
        factory: Callable[[], Any],
        singleton: bool = True,
    ) -> None:
        """Bind ``port_type`` to ``factory``.

        Args:
            port_type: Protocol or concrete service type used as the key.
            factory: Zero-argument callable building an instance.
            singleton: Share one instance instead of building per resolve.
        """
        with self._lock:
            self._bindings[port_type] = _Binding(factory=factory, shared=singleton)
            self._instances.pop(port_type, None)

    def resolve(self, port_type: type[Any]) -> Any:
        """Return an instance for ``port_type``.

        Raises:
            KeyError: If nothing is bound to the type.
        """
        with self._lock:
            binding = self._bindings.get(port_type)
            if binding is None:
                raise KeyError(f"Type not registered: {port_type}")
            if not binding.shared:
                return binding.factory()
            if port_type not in self._instances:
                self._instances[port_type] = binding.factory()
            return self._instances[port_type]

    def is_registered(self, port_type: type[Any]) -> bool:
        return port_type in self._bindings

    def clear_all(self) -> None:
        with self._lock:
            self._bindings.clear()
            self._instances.clear()

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Wire the production router.

        All segment providers share one ResultCaches and one RateLimiter.
        Live place search is only wired when geocoding is enabled;
        otherwise the bundled dataset answers every search.
        """
        from .adapters.cache import ResultCaches
        from .adapters.locations import CSVLocationRepository, NominatimLocationProvider
        from .adapters.ratelimit import RateLimiter
        from .adapters.segments import (
            BusTimetableProvider,
            HereWalkingProvider,
            SkyscannerFlightProvider,
            TrainTimetableProvider,
        )
        from .domain.models import TransportMode
        from .ports.locations import LocationRepositoryPort, LocationSearchPort
        from .services import LocationResolver, RoutingEngine

        config = config or get_config()
        container = cls(config=config)

        container.register(ResultCaches, lambda: ResultCaches.from_config(config.cache))
        container.register(RateLimiter, lambda: RateLimiter(config.rate_limits))

        # Locations
        container.register(
            LocationRepositoryPort,
            lambda: CSVLocationRepository(config.location),
        )
        if config.geocoding.enabled:
            container.register(
                LocationSearchPort,
                lambda: NominatimLocationProvider(config.geocoding),
            )

        def create_resolver() -> LocationResolver:
            search_provider = (
                container.resolve(LocationSearchPort)
                if container.is_registered(LocationSearchPort)
                else None
            )
            return LocationResolver(
                repository=container.resolve(LocationRepositoryPort),
                caches=container.resolve(ResultCaches),
                search_provider=search_provider,
                config=config.location,
            )

        container.register(LocationResolver, create_resolver)

        # Segment providers
        def shared_state() -> Dict[str, Any]:
            return {
                "caches": container.resolve(ResultCaches),
                "rate_limiter": container.resolve(RateLimiter),
                "config": config.providers,
            }

        container.register(
            SkyscannerFlightProvider,
            lambda: SkyscannerFlightProvider(
                **shared_state(),
                min_distance_km=config.routing.flight_min_distance_km,
            ),
        )
        container.register(TrainTimetableProvider, lambda: TrainTimetableProvider(**shared_state()))
        container.register(BusTimetableProvider, lambda: BusTimetableProvider(**shared_state()))
        container.register(HereWalkingProvider, lambda: HereWalkingProvider(**shared_state()))

        def create_engine() -> RoutingEngine:
            return RoutingEngine(
                resolver=container.resolve(LocationResolver),
                providers={
                    TransportMode.FLIGHT: container.resolve(SkyscannerFlightProvider),
                    TransportMode.TRAIN: container.resolve(TrainTimetableProvider),
                    TransportMode.BUS: container.resolve(BusTimetableProvider),
                    TransportMode.WALK: container.resolve(HereWalkingProvider),
                },
                config=config.routing,
            )

        container.register(RoutingEngine, create_engine)

        return container


_app_container: Optional[Container] = None
_app_container_lock = threading.Lock()


def get_container() -> Container:
    """Process-wide container used by the HTTP app, built on first use."""
    global _app_container
    with _app_container_lock:
        if _app_container is None:
            _app_container = Container.create_default()
        return _app_container


def reset_container() -> None:
    """Drop the process-wide container; the next get_container() rebuilds it."""
    global _app_container
    with _app_container_lock:
        if _app_container is not None:
            _app_container.clear_all()
        _app_container = None
