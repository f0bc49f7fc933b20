import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from linkhub_app.config import settings
from linkhub_app.core.handlers import register_exception_handlers
from linkhub_app.core.security_headers import SecurityHeadersMiddleware
from linkhub_app.dependencies import get_client_ip, get_rate_limiter
from linkhub_app.ratelimit.middleware import RateLimitMiddleware
from linkhub_app.storage.factory import init_storage
from linkhub_app.api import links, hubs, redirect, health

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("linkhub")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s %s (%s)", settings.app_name, settings.app_version, settings.environment)
    logger.info("Storage backend: %s, allowed origins: %s", settings.storage_backend, settings.cors_origins)
    # Create tables / indexes
    init_storage()
    yield
    logger.info("%s stopped", settings.app_name)


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="URL shortener and link hub service built with FastAPI",
    lifespan=lifespan,
)

# Added last = outermost: CORS and security headers end up on rate-limited responses too
app.add_middleware(RateLimitMiddleware, get_limiter=get_rate_limiter, get_client_ip=get_client_ip, path_prefix="/api")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)
app.add_middleware(SecurityHeadersMiddleware)

register_exception_handlers(app)


@app.get("/")
def read_root():
    """Root endpoint with API information"""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc"
    }


######## Include routers
# The catch-all redirect router goes last so it never shadows /health or /api
app.include_router(health.router)
app.include_router(links.router, prefix="/api")
app.include_router(hubs.router, prefix="/api")
app.include_router(redirect.router)
