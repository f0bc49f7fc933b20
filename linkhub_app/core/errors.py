from __future__ import annotations
from dataclasses import dataclass
from typing import Any, List, Optional

from fastapi import HTTPException


class LinkHubError(Exception):
    """Base class for errors that map onto an HTTP status"""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NameUnavailableError(LinkHubError):
    """Requested short name is empty, malformed, reserved or already taken"""

    status_code = 409


class NameGenerationError(LinkHubError):
    """Random short-name generation ran out of attempts"""

    status_code = 500


@dataclass(frozen=True)
class ApiError:
    code: str
    message: str
    details: Optional[Any] = None

    def to_body(self) -> dict:
        error: dict = {"code": self.code, "message": self.message}
        if self.details is not None:
            error["details"] = self.details
        return {"success": False, "error": error}


STATUS_TO_ERROR_CODE: dict[int, str] = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    410: "GONE",
    422: "VALIDATION_ERROR",
    429: "RATE_LIMITED",
    500: "INTERNAL_SERVER_ERROR",
    503: "SERVICE_UNAVAILABLE",
}


def error_code_for(status: int) -> str:
    return STATUS_TO_ERROR_CODE.get(status, "ERROR")


def normalize_http_exception(exc: HTTPException) -> ApiError:
    """
    Converts HTTPException.detail into (code, message).

    Supports:
    - detail as str -> message=str, code inferred from status
    - detail as {"code": "...", "message": "..."} -> use directly
    - detail as {"error": {"code": "...", "message": "..."}} -> use directly
    """
    status = exc.status_code
    default_code = error_code_for(status)

    detail: Any = exc.detail
    if isinstance(detail, dict):
        if "error" in detail and isinstance(detail["error"], dict):
            inner = detail["error"]
            if "code" in inner and "message" in inner:
                return ApiError(code=str(inner["code"]), message=str(inner["message"]))
        if "code" in detail and "message" in detail:
            return ApiError(code=str(detail["code"]), message=str(detail["message"]))

    # fallback
    msg = detail if isinstance(detail, str) else "Request failed"
    return ApiError(code=default_code, message=str(msg))


def format_validation_errors(errors: List[dict]) -> List[dict]:
    """
    Flattens pydantic/FastAPI validation errors into [{field, message}].

    The leading "body"/"query"/"path" location segment is dropped so the
    field reads the way the client sent it (e.g. "links.0.url").
    """
    formatted = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path", "header"):
            loc = loc[1:]
        formatted.append({
            "field": ".".join(loc) or None,
            "message": err.get("msg", "Invalid value"),
        })
    return formatted
