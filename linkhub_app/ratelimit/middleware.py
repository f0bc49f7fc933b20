import logging
from typing import Callable

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from linkhub_app.core.errors import ApiError, error_code_for
from linkhub_app.ratelimit.strategies import RateLimiterStrategy

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Fixed-window, per-client-IP limit on every path under `path_prefix`.

    The limiter is looked up per request through `get_limiter` so tests can
    swap or reset it without rebuilding the app.
    """

    def __init__(
        self,
        app,
        get_limiter: Callable[[], RateLimiterStrategy],
        get_client_ip: Callable[[Request], str],
        path_prefix: str = "/api",
    ):
        super().__init__(app)
        self.get_limiter = get_limiter
        self.get_client_ip = get_client_ip
        self.path_prefix = path_prefix

    def _applies_to(self, path: str) -> bool:
        return path == self.path_prefix or path.startswith(self.path_prefix + "/")

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS" or not self._applies_to(request.url.path):
            return await call_next(request)

        ip = self.get_client_ip(request)
        result = await self.get_limiter().hit(ip)

        headers = {
            "X-RateLimit-Limit": str(result.limit),
            "X-RateLimit-Remaining": str(result.remaining),
        }

        if not result.allowed:
            logger.info("Rate limit exceeded for %s on %s", ip, request.url.path)
            error = ApiError(
                code=error_code_for(429),
                message="Too many requests from this IP, please try again later.",
            )
            headers["Retry-After"] = str(result.reset_seconds)
            return JSONResponse(status_code=429, content=error.to_body(), headers=headers)

        response = await call_next(request)
        response.headers.update(headers)
        return response
