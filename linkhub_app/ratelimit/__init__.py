"""
Rate limiting for the /api prefix.
Implements Strategy Pattern for Redis or in-memory fixed-window counters.
"""

from .strategies import RateLimitResult, RateLimiterStrategy, RedisRateLimiter, InMemoryRateLimiter
from .factory import RateLimiterFactory, RateLimiterBackend
from .middleware import RateLimitMiddleware

__all__ = [
    "RateLimitResult",
    "RateLimiterStrategy",
    "RedisRateLimiter",
    "InMemoryRateLimiter",
    "RateLimiterFactory",
    "RateLimiterBackend",
    "RateLimitMiddleware",
]
