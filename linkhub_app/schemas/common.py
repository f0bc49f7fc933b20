from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from linkhub_app.services.keyspace import MAX_NAME_LENGTH, MIN_NAME_LENGTH

T = TypeVar("T")

_http_url = TypeAdapter(HttpUrl)


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(CamelModel, Generic[T]):
    """Success envelope: {"success": true, "data": ...}"""

    success: bool = True
    data: T


def validate_http_url(value: str) -> str:
    """
    Reject anything that isn't an absolute http(s) URL, but keep the string
    exactly as submitted (HttpUrl would append a trailing slash).
    """
    value = value.strip()
    try:
        _http_url.validate_python(value)
    except ValidationError:
        raise ValueError("Invalid URL format")
    return value


def normalize_custom_name(value: Optional[str]) -> Optional[str]:
    # Blank means "generate one for me"
    if value is None or not value.strip():
        return None
    value = value.strip()
    if not MIN_NAME_LENGTH <= len(value) <= MAX_NAME_LENGTH:
        raise ValueError(
            f"Custom name must be between {MIN_NAME_LENGTH} and {MAX_NAME_LENGTH} characters"
        )
    return value


class AvailabilityRequest(CamelModel):
    custom_name: str = Field(..., min_length=1, description="Name to check")

    @field_validator("custom_name")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()


class AvailabilityResponse(CamelModel):
    custom_name: str
    available: bool
    reason: Optional[str] = None
