"""Rate limiting for outbound provider calls."""

from .limiter import Permit, RateLimiter, ServiceRateLimiter

__all__ = ["Permit", "RateLimiter", "ServiceRateLimiter"]
