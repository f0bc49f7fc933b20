"""
Exception handlers that render every error in the same JSON envelope:

    {"success": false, "error": {"code": "...", "message": "...", "details": ...}}
"""

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from linkhub_app.config import settings
from linkhub_app.core.errors import (
    ApiError,
    LinkHubError,
    error_code_for,
    format_validation_errors,
    normalize_http_exception,
)

logger = logging.getLogger(__name__)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error = normalize_http_exception(exc)
    return JSONResponse(
        status_code=exc.status_code,
        content=error.to_body(),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # 400 rather than FastAPI's default 422
    error = ApiError(
        code=error_code_for(400),
        message="Invalid input",
        details=format_validation_errors(exc.errors()),
    )
    return JSONResponse(status_code=400, content=error.to_body())


async def linkhub_error_handler(request: Request, exc: LinkHubError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    error = ApiError(code=error_code_for(exc.status_code), message=exc.message)
    return JSONResponse(status_code=exc.status_code, content=error.to_body())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)

    details = None
    if not settings.is_production:
        details = {
            "error": str(exc),
            "stack": traceback.format_exception(type(exc), exc, exc.__traceback__),
        }

    error = ApiError(code=error_code_for(500), message="Internal server error", details=details)
    return JSONResponse(status_code=500, content=error.to_body())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(LinkHubError, linkhub_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
