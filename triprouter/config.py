"""Centralized configuration using Pydantic Settings.

This module provides a single source of truth for all configuration:
cache sizes, rate limit rules, provider credentials, routing thresholds
and logging.

Configuration can be overridden via environment variables:
- TRIP_PROVIDER_SKYSCANNER_API_KEY=...
- TRIP_ROUTING_GATHER_TIMEOUT_SECONDS=20
- TRIP_CACHE_API_MAX_SIZE=500
- TRIP_LOG_LEVEL=DEBUG
- etc.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RateLimitRule(BaseModel):
    """Sliding-window admission rule for one outbound service."""

    max_requests: int = Field(default=10, ge=1)
    window_seconds: float = Field(default=10.0, gt=0)
    queue_timeout_seconds: float = Field(default=30.0, gt=0)


def _default_rules() -> Dict[str, RateLimitRule]:
    return {
        "skyscanner": RateLimitRule(
            max_requests=5, window_seconds=10.0, queue_timeout_seconds=60.0
        ),
        "here": RateLimitRule(max_requests=10, window_seconds=10.0),
    }


class RateLimitConfig(BaseSettings):
    """Rate limiting configuration.

    Environment variables prefixed with TRIP_RATE_.
    """

    model_config = SettingsConfigDict(env_prefix="TRIP_RATE_")

    rules: Dict[str, RateLimitRule] = Field(default_factory=_default_rules)
    default_rule: RateLimitRule = Field(default_factory=RateLimitRule)


class CacheConfig(BaseSettings):
    """Result cache configuration.

    Environment variables prefixed with TRIP_CACHE_.
    """

    model_config = SettingsConfigDict(env_prefix="TRIP_CACHE_")

    api_max_size: int = 200
    location_max_size: int = 100
    route_max_size: int = 50
    cleanup_interval_seconds: float = 600.0
    single_flight: bool = True


class ProvidersConfig(BaseSettings):
    """Segment provider configuration.

    Environment variables prefixed with TRIP_PROVIDER_.
    """

    model_config = SettingsConfigDict(env_prefix="TRIP_PROVIDER_")

    skyscanner_api_key: str = ""
    skyscanner_host: str = "skyscanner89.p.rapidapi.com"
    here_api_key: str = ""
    here_base_url: str = "https://router.hereapi.com/v8/routes"
    rail_base_url: Optional[str] = None
    coach_base_url: Optional[str] = None
    timeout_seconds: float = 10.0

    flight_ttl_seconds: int = 6 * 60 * 60
    train_ttl_seconds: int = 3 * 60 * 60
    bus_ttl_seconds: int = 3 * 60 * 60
    walk_ttl_seconds: int = 60 * 60


class GeocodingConfig(BaseSettings):
    """Nominatim location search configuration.

    Environment variables prefixed with TRIP_GEO_.
    """

    model_config = SettingsConfigDict(env_prefix="TRIP_GEO_")

    enabled: bool = False
    user_agent: str = "triprouter"
    timeout_seconds: int = 10
    max_results: int = 5
    language: str = "en"
    rate_limit_delay: float = 1.0  # Nominatim usage policy: 1 req/s
    max_retries: int = 2
    error_wait_seconds: float = 5.0


class LocationConfig(BaseSettings):
    """Location dataset and resolver configuration.

    Environment variables prefixed with TRIP_LOCATION_.
    """

    model_config = SettingsConfigDict(env_prefix="TRIP_LOCATION_")

    dataset_path: Path = Field(
        default_factory=lambda: Path(__file__).resolve().parent
        / "data"
        / "locations.csv"
    )
    search_ttl_seconds: int = 24 * 60 * 60
    nearby_ttl_seconds: int = 48 * 60 * 60
    max_hubs: int = 3


class RoutingConfig(BaseSettings):
    """Routing engine configuration.

    Environment variables prefixed with TRIP_ROUTING_.
    """

    model_config = SettingsConfigDict(env_prefix="TRIP_ROUTING_")

    walking_max_km: float = 10.0
    bus_max_km: float = 300.0
    train_max_km: float = 1000.0
    flight_min_distance_km: float = 100.0
    max_locations_per_side: int = 3
    max_connection_checks: int = 1000
    same_city_transfer_minutes: int = 60
    default_transfer_minutes: int = 120
    gather_timeout_seconds: Optional[float] = None


class ObservabilityConfig(BaseSettings):
    """Logging and observability configuration.

    Environment variables prefixed with TRIP_LOG_.
    """

    model_config = SettingsConfigDict(env_prefix="TRIP_LOG_")

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = False  # Set True for JSON logging


class ServerConfig(BaseSettings):
    """HTTP server configuration.

    Environment variables prefixed with TRIP_SERVER_.
    """

    model_config = SettingsConfigDict(env_prefix="TRIP_SERVER_")

    host: str = "127.0.0.1"
    port: int = 8000


class AppConfig(BaseSettings):
    """Main application configuration aggregating all sub-configs.

        config = get_config()
        print(config.routing.max_connection_checks)
        print(config.location.dataset_path)

    Environment variables prefixed with TRIP_.
    """

    model_config = SettingsConfigDict(env_prefix="TRIP_")

    cache: CacheConfig = Field(default_factory=CacheConfig)
    rate_limits: RateLimitConfig = Field(default_factory=RateLimitConfig)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    geocoding: GeocodingConfig = Field(default_factory=GeocodingConfig)
    location: LocationConfig = Field(default_factory=LocationConfig)
    routing: RoutingConfig = Field(default_factory=RoutingConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the singleton application configuration.

    Configuration is loaded once and cached. To reload configuration
    (e.g., in tests), use reset_config() first.

    Returns:
        The application configuration instance.
    """
    return AppConfig()


def reset_config() -> None:
    """Reset the configuration cache.

    Call this in tests to ensure a fresh configuration is loaded.
    """
    get_config.cache_clear()
