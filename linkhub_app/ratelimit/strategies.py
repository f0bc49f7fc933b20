"""
Fixed-window rate limiter strategies.
Allows switching between Redis (shared across processes) and in-memory counters.
"""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from redis import Redis, RedisError
from starlette.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_seconds: int


class RateLimiterStrategy(ABC):
    """
    Abstract base class for rate limiter strategies.

    Every key gets `limit` requests per `window_seconds`; the window starts
    at the key's first request and the count resets when it ends.
    """

    def __init__(self, limit: int, window_seconds: int):
        self.limit = limit
        self.window_seconds = window_seconds

    @abstractmethod
    async def hit(self, key: str) -> RateLimitResult:
        """Count one request against key and report whether it is allowed"""
        pass

    def _result(self, count: int, reset_seconds: int) -> RateLimitResult:
        return RateLimitResult(
            allowed=count <= self.limit,
            limit=self.limit,
            remaining=max(0, self.limit - count),
            reset_seconds=reset_seconds,
        )


class RedisRateLimiter(RateLimiterStrategy):
    """
    Redis implementation: INCR the key, start the TTL on the first hit.

    Shared by every worker process that points at the same Redis. The
    blocking client runs in the threadpool; while Redis errors out, hits
    are counted by a per-process in-memory limiter instead.
    """

    def __init__(
        self,
        redis_client: Redis,
        limit: int,
        window_seconds: int,
        prefix: str = "rl:api",
        fallback: Optional[InMemoryRateLimiter] = None,
    ):
        super().__init__(limit, window_seconds)
        self.redis = redis_client
        self.prefix = prefix
        self.fallback = fallback or InMemoryRateLimiter(limit=limit, window_seconds=window_seconds)

    def _count(self, key: str) -> RateLimitResult:
        redis_key = f"{self.prefix}:{key}"
        count = int(self.redis.incr(redis_key))

        if count == 1:
            # first request in the window; start the window timer
            self.redis.expire(redis_key, self.window_seconds)

        ttl = self.redis.ttl(redis_key)
        reset_seconds = ttl if isinstance(ttl, int) and ttl > 0 else self.window_seconds

        return self._result(count, reset_seconds)

    async def hit(self, key: str) -> RateLimitResult:
        try:
            return await run_in_threadpool(self._count, key)
        except RedisError as e:
            logger.warning("Redis rate limiter error, counting in memory: %s", e)
            return await self.fallback.hit(key)


class InMemoryRateLimiter(RateLimiterStrategy):
    """
    In-memory implementation using a dict of (window_start, count).

    Per process only: every worker keeps its own counters. Good for
    development, tests and single-process deployments. Finished windows
    are swept out at most once per window length.
    """

    def __init__(self, limit: int, window_seconds: int, clock=time.monotonic):
        super().__init__(limit, window_seconds)
        self._clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._lock = threading.Lock()
        self._next_sweep = clock() + window_seconds

    def _sweep(self, now: float) -> None:
        expired = [key for key, (started, _) in self._windows.items() if now - started >= self.window_seconds]
        for key in expired:
            del self._windows[key]
        self._next_sweep = now + self.window_seconds

    async def hit(self, key: str) -> RateLimitResult:
        now = self._clock()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)

            started, count = self._windows.get(key, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0
            count += 1
            self._windows[key] = (started, count)

        reset_seconds = max(1, int(round(self.window_seconds - (now - started))))
        return self._result(count, reset_seconds)

    def __len__(self) -> int:
        return len(self._windows)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
