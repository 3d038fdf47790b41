"""Shared flow for HTTP-backed segment providers.

Every provider follows the same steps:

1. ``_precheck`` may answer immediately (e.g. flights over short hops).
2. The raw upstream payload is read through the ``api`` result cache;
   on a miss it is fetched while holding a rate-limiter permit.
3. The payload is parsed into fresh segments for this request.
4. Upstream, network, rate-limit and parse failures turn into a degraded
   result carrying synthetic segments. A payload that fails to parse is
   never cached.
"""

from __future__ import annotations

import logging
import random
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, AsyncIterator, ClassVar, Dict, List, Mapping, Optional

import httpx

from ...config import ProvidersConfig, get_config
from ...dates import format_api_date
from ...domain.errors import ProviderFailure, RateLimitTimeout
from ...domain.models import Location, ProviderResult, TransportMode, TransportSegment
from ..cache import API, ResultCaches
from ..ratelimit import RateLimiter

# Failures a provider absorbs into a degraded result.
RECOVERABLE_ERRORS = (
    ProviderFailure,
    RateLimitTimeout,
    httpx.HTTPError,
    ArithmeticError,  # decimal.InvalidOperation from malformed prices
    AttributeError,
    KeyError,
    TypeError,
    ValueError,
)


def parse_timestamp(value: Any) -> datetime:
    """Parse an upstream ISO timestamp into an aware UTC datetime."""
    dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_price(value: Any) -> Decimal:
    return Decimal(str(value))


@dataclass
class BaseSegmentProvider:
    """Common machinery for segment providers.

    Subclasses set ``mode`` and ``service`` and implement ``_fetch``,
    ``_parse`` and ``_synthetic``.

    Attributes:
        caches: Result caches; payloads go to the ``api`` namespace
        rate_limiter: Per-service admission control
        config: Provider credentials, endpoints and TTLs
        client: Optional shared HTTP client (a fresh one per call otherwise)
        rng: Randomness for synthetic prices
    """

    mode: ClassVar[TransportMode]
    service: ClassVar[str]

    caches: ResultCaches
    rate_limiter: RateLimiter
    config: ProvidersConfig = field(default_factory=lambda: get_config().providers)
    client: Optional[httpx.AsyncClient] = None
    rng: random.Random = field(default_factory=random.Random, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(type(self).__module__)

    @property
    def ttl_seconds(self) -> float:
        raise NotImplementedError

    async def search(
        self,
        origin: Location,
        destination: Location,
        departure: datetime,
    ) -> ProviderResult:
        early = self._precheck(origin, destination)
        if early is not None:
            return early

        try:
            payload = await self.caches.cached_request(
                self._cache_params(origin, destination, departure),
                lambda: self._fetch_checked(origin, destination, departure),
                ttl_seconds=self.ttl_seconds,
                namespace=API,
            )
            segments = self._parse(payload, origin, destination, departure)
        except RECOVERABLE_ERRORS as e:
            return self._degrade(origin, destination, departure, reason=str(e) or type(e).__name__)

        if not segments:
            return self._on_empty(origin, destination, departure)

        self._logger.debug(
            "Live segments found",
            extra={
                "service": self.service,
                "origin": origin.id,
                "destination": destination.id,
                "segments": len(segments),
            },
        )
        return ProviderResult.ok(segments)

    def _precheck(self, origin: Location, destination: Location) -> Optional[ProviderResult]:
        return None

    def _cache_params(
        self, origin: Location, destination: Location, departure: datetime
    ) -> Dict[str, Any]:
        return {
            "type": f"{self.mode.value}_search",
            "service": self.service,
            "origin": origin.id,
            "destination": destination.id,
            "date": format_api_date(departure),
        }

    async def _fetch_throttled(
        self, origin: Location, destination: Location, departure: datetime
    ) -> Any:
        async with self.rate_limiter.throttle(self.service):
            return await self._fetch(origin, destination, departure)

    async def _fetch_checked(
        self, origin: Location, destination: Location, departure: datetime
    ) -> Any:
        """Fetch a payload and parse it once; parse errors propagate uncached."""
        payload = await self._fetch_throttled(origin, destination, departure)
        self._parse(payload, origin, destination, departure)
        return payload

    async def _fetch(self, origin: Location, destination: Location, departure: datetime) -> Any:
        raise NotImplementedError

    def _parse(
        self, payload: Any, origin: Location, destination: Location, departure: datetime
    ) -> List[TransportSegment]:
        raise NotImplementedError

    def _synthetic(
        self, origin: Location, destination: Location, departure: datetime
    ) -> List[TransportSegment]:
        raise NotImplementedError

    def _on_empty(
        self, origin: Location, destination: Location, departure: datetime
    ) -> ProviderResult:
        return ProviderResult.ok()

    def _degrade(
        self, origin: Location, destination: Location, departure: datetime, reason: str
    ) -> ProviderResult:
        self._logger.warning(
            "Provider unavailable, using synthetic segments",
            extra={
                "service": self.service,
                "origin": origin.id,
                "destination": destination.id,
                "reason": reason,
            },
        )
        return ProviderResult.degraded(self._synthetic(origin, destination, departure), reason)

    @asynccontextmanager
    async def _http(self) -> AsyncIterator[httpx.AsyncClient]:
        if self.client is not None:
            yield self.client
            return
        async with httpx.AsyncClient(timeout=self.config.timeout_seconds) as client:
            yield client

    async def _get_json(
        self,
        url: str,
        params: Mapping[str, Any],
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """GET ``url`` and decode the JSON body.

        Raises:
            ProviderFailure: The upstream answered with an error status.
        """
        async with self._http() as client:
            response = await client.get(url, params=dict(params), headers=dict(headers or {}))
        if response.is_error:
            raise ProviderFailure(
                f"{self.service} request failed with status {response.status_code}",
                provider=self.service,
                status_code=response.status_code,
            )
        return response.json()

    def _segment_id(
        self, origin: Location, destination: Location, departure: datetime, index: int
    ) -> str:
        return (
            f"{self.mode.value}-{origin.id}-{destination.id}-"
            f"{departure.strftime('%Y%m%d%H%M')}-{index}"
        )
