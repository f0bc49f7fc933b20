"""
Factory for creating rate limiter instances.
Simple, clean factory with singleton caching.
"""

import logging
from enum import Enum

from .strategies import RateLimiterStrategy, RedisRateLimiter, InMemoryRateLimiter
from linkhub_app.config import settings

logger = logging.getLogger(__name__)


class RateLimiterBackend(Enum):
    """Available rate limiter backends"""
    REDIS = "redis"
    MEMORY = "memory"


class RateLimiterFactory:
    """
    Simple factory for creating rate limiter instances.

    Uses Singleton Pattern - creates instance once, reuses it.
    Gets configuration from settings (not passed as parameters).
    """

    _instance: RateLimiterStrategy = None  # Single cached instance

    @classmethod
    def create(cls, backend: RateLimiterBackend) -> RateLimiterStrategy:
        """
        Create or return cached rate limiter instance.

        Args:
            backend: Type of rate limiter backend (from enum)

        Returns:
            Singleton rate limiter instance
        """
        if cls._instance is not None:
            return cls._instance

        limit = settings.rate_limit_max_requests
        window = settings.rate_limit_window_seconds

        if backend == RateLimiterBackend.REDIS:
            import redis

            try:
                redis_client = redis.from_url(
                    settings.redis_url,
                    decode_responses=True,
                    socket_connect_timeout=2,
                    socket_timeout=2,
                )

                # Test connection immediately
                redis_client.ping()

                cls._instance = RedisRateLimiter(redis_client, limit=limit, window_seconds=window)
                logger.info("Redis rate limiter initialized")

            except redis.RedisError as e:
                logger.warning("Redis connection failed: %s", e)
                logger.warning("Falling back to in-memory rate limiter")
                cls._instance = InMemoryRateLimiter(limit=limit, window_seconds=window)

        elif backend == RateLimiterBackend.MEMORY:
            cls._instance = InMemoryRateLimiter(limit=limit, window_seconds=window)
            logger.info("In-memory rate limiter initialized")

        else:
            raise ValueError(f"Unknown rate limiter backend: {backend}")

        return cls._instance

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None
