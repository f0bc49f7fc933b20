"""
FastAPI dependencies for dependency injection.

This module wires storage, the shared keyspace and the services that are
injected into routes.

Pattern: Dependency Injection
- Routes depend on services, services depend on storage
- Easy to test (override get_db or get_storage)
- Backend chosen by config, not by code
"""

from functools import lru_cache

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from linkhub_app.config import settings
from linkhub_app.database.connection import get_db
from linkhub_app.ratelimit.factory import RateLimiterBackend, RateLimiterFactory
from linkhub_app.ratelimit.strategies import RateLimiterStrategy
from linkhub_app.services.hub_service import HubService
from linkhub_app.services.keyspace import Keyspace
from linkhub_app.services.link_service import ClickContext, LinkService
from linkhub_app.services.short_name_strategies import RandomShortNameStrategy, ShortNameStrategy
from linkhub_app.storage.factory import StorageBackend, StorageFactory
from linkhub_app.storage.strategies import StorageStrategy


@lru_cache()
def get_short_name_strategy() -> ShortNameStrategy:
    """
    Get short name strategy (singleton).

    @lru_cache ensures this is called only once.
    """
    return RandomShortNameStrategy(
        length=settings.short_name_length,
        alphabet=settings.short_name_alphabet,
    )


def get_rate_limiter() -> RateLimiterStrategy:
    """Get rate limiter instance (singleton held by the factory)"""
    backend = RateLimiterBackend(settings.rate_limit_backend)
    return RateLimiterFactory.create(backend)


def get_storage(db: Session = Depends(get_db)) -> StorageStrategy:
    backend = StorageBackend(settings.storage_backend)
    return StorageFactory.create(backend, db_session=db)


def get_keyspace(
    storage: StorageStrategy = Depends(get_storage),
    strategy: ShortNameStrategy = Depends(get_short_name_strategy),
) -> Keyspace:
    return Keyspace(storage, strategy, max_attempts=settings.max_name_attempts)


def get_link_service(
    storage: StorageStrategy = Depends(get_storage),
    keyspace: Keyspace = Depends(get_keyspace),
) -> LinkService:
    """
    Get LinkService with all dependencies injected.

    FastAPI caches get_storage per request, so the service and the keyspace
    share one storage instance (and one DB session).
    """
    return LinkService(storage=storage, keyspace=keyspace)


def get_hub_service(
    storage: StorageStrategy = Depends(get_storage),
    keyspace: Keyspace = Depends(get_keyspace),
) -> HubService:
    return HubService(storage=storage, keyspace=keyspace)


def get_client_ip(request: Request) -> str:
    # Behind nginx/traefik the peer address is the proxy; trust the first forwarded hop
    if settings.trust_proxy:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def get_click_context(request: Request) -> ClickContext:
    return ClickContext(
        user_ip=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
        referrer=request.headers.get("referer"),
    )
