"""Per-service sliding-window rate limiter with a FIFO wait queue.

Each outbound service gets a ServiceRateLimiter that admits at most
``max_requests`` calls per ``window_seconds``. Callers over the limit
wait in arrival order until a holder releases its permit or the window
moves on. Waiting longer than ``queue_timeout_seconds`` raises
RateLimitTimeout.

State is owned by the event loop and only touched between suspension
points, so no lock is needed.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, Deque, Dict, Optional

from ...config import RateLimitConfig, RateLimitRule
from ...domain.errors import RateLimitTimeout


@dataclass(frozen=True, slots=True)
class Permit:
    """Proof of admission, handed back to ``release``."""

    service: str
    granted_at: float


@dataclass
class ServiceRateLimiter:
    """Admission control for a single service.

    Attributes:
        service: Service identifier (e.g. 'skyscanner')
        rule: Window size, request budget and queue timeout
        clock: Monotonic time source in seconds
    """

    service: str
    rule: RateLimitRule
    clock: Callable[[], float] = time.monotonic

    _timestamps: Deque[float] = field(default_factory=deque, repr=False)
    _waiters: Deque["asyncio.Future[Permit]"] = field(default_factory=deque, repr=False)
    _drain_handle: Optional[asyncio.TimerHandle] = field(default=None, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(f"ratelimit.{self.service}")

    @property
    def queue_depth(self) -> int:
        return sum(1 for waiter in self._waiters if not waiter.done())

    def in_window(self) -> int:
        self._prune(self.clock())
        return len(self._timestamps)

    def _prune(self, now: float) -> None:
        cutoff = now - self.rule.window_seconds
        while self._timestamps and self._timestamps[0] <= cutoff:
            self._timestamps.popleft()

    def _record(self, now: float) -> Permit:
        self._timestamps.append(now)
        return Permit(service=self.service, granted_at=now)

    async def acquire(self) -> Permit:
        """Wait for a slot and return a permit.

        Raises:
            RateLimitTimeout: The caller stayed queued past the queue timeout.
        """
        now = self.clock()
        self._prune(now)
        if self.queue_depth == 0 and len(self._timestamps) < self.rule.max_requests:
            return self._record(now)

        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[Permit] = loop.create_future()
        self._waiters.append(waiter)
        self._schedule_drain()
        self._logger.debug(
            "Request queued",
            extra={"service": self.service, "queue_depth": self.queue_depth},
        )

        started = now
        try:
            return await asyncio.wait_for(waiter, timeout=self.rule.queue_timeout_seconds)
        except asyncio.TimeoutError:
            self._discard(waiter)
            waited = self.clock() - started
            self._logger.warning(
                "Rate limit queue timeout",
                extra={"service": self.service, "waited_seconds": round(waited, 3)},
            )
            raise RateLimitTimeout(
                message=f"Timed out waiting for a {self.service} request slot",
                service=self.service,
                waited_seconds=waited,
            )
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                self._give_back(waiter.result())
            else:
                self._discard(waiter)
            raise

    def release(self, permit: Optional[Permit] = None) -> None:
        """Hand the caller's slot to the oldest waiter, if any."""
        while self._waiters:
            waiter = self._waiters.popleft()
            if waiter.done():
                continue
            waiter.set_result(self._record(self.clock()))
            self._logger.debug(
                "Slot handed to queued request",
                extra={"service": self.service, "queue_depth": self.queue_depth},
            )
            break
        self._reschedule()

    @asynccontextmanager
    async def throttle(self) -> AsyncIterator[Permit]:
        permit = await self.acquire()
        try:
            yield permit
        finally:
            self.release(permit)

    def _discard(self, waiter: "asyncio.Future[Permit]") -> None:
        try:
            self._waiters.remove(waiter)
        except ValueError:
            pass
        self._reschedule()

    def _give_back(self, permit: Permit) -> None:
        """Undo a grant whose receiver was cancelled before using it."""
        try:
            self._timestamps.remove(permit.granted_at)
        except ValueError:
            pass
        self._grant_available()
        self._reschedule()

    def _grant_available(self) -> None:
        now = self.clock()
        self._prune(now)
        while self._waiters and len(self._timestamps) < self.rule.max_requests:
            waiter = self._waiters.popleft()
            if waiter.done():
                continue
            waiter.set_result(self._record(now))

    def _drain(self) -> None:
        self._drain_handle = None
        self._grant_available()
        self._reschedule()

    def _schedule_drain(self) -> None:
        if self._drain_handle is not None or not self._waiters:
            return
        loop = asyncio.get_running_loop()
        if self._timestamps:
            delay = self._timestamps[0] + self.rule.window_seconds - self.clock()
        else:
            delay = 0.0
        self._drain_handle = loop.call_later(max(delay, 0.0), self._drain)

    def _reschedule(self) -> None:
        if self._drain_handle is not None:
            self._drain_handle.cancel()
            self._drain_handle = None
        if self.queue_depth:
            self._schedule_drain()
        else:
            self._waiters.clear()

    def stats(self) -> Dict[str, Any]:
        return {
            "in_window": self.in_window(),
            "max_requests": self.rule.max_requests,
            "window_seconds": self.rule.window_seconds,
            "queue_depth": self.queue_depth,
        }


@dataclass
class RateLimiter:
    """Registry of per-service limiters built from RateLimitConfig.

    Services without a configured rule get the default rule on first use.

    Example:
        limiter = RateLimiter(config.rate_limits)
        async with limiter.throttle("skyscanner"):
            response = await client.get(url)
    """

    config: RateLimitConfig = field(default_factory=RateLimitConfig)
    clock: Callable[[], float] = time.monotonic

    _limiters: Dict[str, ServiceRateLimiter] = field(default_factory=dict, repr=False)

    def limiter_for(self, service: str) -> ServiceRateLimiter:
        limiter = self._limiters.get(service)
        if limiter is None:
            rule = self.config.rules.get(service, self.config.default_rule)
            limiter = ServiceRateLimiter(service=service, rule=rule, clock=self.clock)
            self._limiters[service] = limiter
        return limiter

    async def acquire(self, service: str) -> Permit:
        return await self.limiter_for(service).acquire()

    def release(self, service: str, permit: Optional[Permit] = None) -> None:
        limiter = self._limiters.get(service)
        if limiter is not None:
            limiter.release(permit)

    @asynccontextmanager
    async def throttle(self, service: str) -> AsyncIterator[Permit]:
        """Hold a permit for ``service`` for the duration of the block."""
        async with self.limiter_for(service).throttle() as permit:
            yield permit

    def stats(self) -> Dict[str, Dict[str, Any]]:
        return {name: limiter.stats() for name, limiter in self._limiters.items()}
