"""HTTP surface - thin FastAPI handlers over the routing engine."""

from __future__ import annotations

import logging
import math
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse

from .adapters.cache import ResultCaches
from .container import Container, get_container
from .domain.errors import InvalidEndpoint, InvalidRequest
from .services import LocationResolver, RoutingEngine

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _optional_number(raw: Optional[str], field_name: str) -> Optional[float]:
    if raw is None or raw.strip() == "":
        return None
    try:
        value = float(raw)
    except ValueError as e:
        raise InvalidRequest(f"{field_name} must be a number", field_name=field_name, cause=e)
    if not math.isfinite(value):
        raise InvalidRequest(f"{field_name} must be a finite number", field_name=field_name)
    return value


def create_app(container: Optional[Container] = None) -> FastAPI:
    """Build the FastAPI application around a container.

    The cache janitor runs for the lifetime of the app.
    """
    container = container or get_container()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        caches: ResultCaches = container.resolve(ResultCaches)
        caches.start_janitor()
        try:
            yield
        finally:
            await caches.stop_janitor()

    app = FastAPI(title="Trip Router API", version="1.0.0", lifespan=lifespan)

    @app.get("/health")
    async def health_check() -> Dict[str, str]:
        return {"status": "healthy"}

    @app.get("/routes")
    async def search_routes(
        origin_id: Optional[str] = Query(default=None, alias="originId"),
        destination_id: Optional[str] = Query(default=None, alias="destinationId"),
        departure_date: Optional[str] = Query(default=None, alias="departureDate"),
        max_price: Optional[str] = Query(default=None, alias="maxPrice"),
        max_duration: Optional[str] = Query(default=None, alias="maxDuration"),
    ) -> Any:
        if not origin_id or not destination_id or not departure_date:
            return _error(400, "Missing required parameters")

        engine: RoutingEngine = container.resolve(RoutingEngine)
        try:
            journeys = await engine.find_routes(
                origin_id,
                destination_id,
                departure_date,
                max_price=_optional_number(max_price, "maxPrice"),
                max_duration=_optional_number(max_duration, "maxDuration"),
            )
        except (InvalidEndpoint, InvalidRequest) as e:
            return _error(400, e.message)
        except Exception:
            logger.exception(
                "Route search failed",
                extra={"origin": origin_id, "destination": destination_id},
            )
            return _error(500, "Failed to search routes")

        return {"routes": [journey.to_dict() for journey in journeys]}

    @app.get("/locations")
    async def search_locations(query: str = "") -> Dict[str, Any]:
        resolver: LocationResolver = container.resolve(LocationResolver)
        locations = await resolver.search(query)
        return {"locations": [location.to_dict() for location in locations]}

    return app
