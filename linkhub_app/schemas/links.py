from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field, computed_field, field_validator

from linkhub_app.config import settings
from linkhub_app.schemas.common import CamelModel, normalize_custom_name, validate_http_url


class CreateLinkRequest(CamelModel):
    original_url: str = Field(..., description="The original URL to be shortened")
    custom_name: Optional[str] = Field(None, description="Optional vanity short name")
    expires_in_seconds: Optional[int] = Field(None, gt=0, description="Lifetime of the link")

    @field_validator("original_url")
    @classmethod
    def check_original_url(cls, value: str) -> str:
        return validate_http_url(value)

    @field_validator("custom_name")
    @classmethod
    def check_custom_name(cls, value: Optional[str]) -> Optional[str]:
        return normalize_custom_name(value)


class LinkResponse(CamelModel):
    """
    Response schema built straight from a LinkRecord.

    - from_attributes=True reads the record's attributes
    - @computed_field adds the public short URL
    """
    id: str
    short_name: str
    original_url: str
    custom_name: Optional[str] = None
    click_count: int
    created_at: datetime
    expires_at: Optional[datetime] = None

    @computed_field(alias="shortUrl")
    @property
    def short_url(self) -> str:
        return f"{settings.base_url.rstrip('/')}/{self.short_name}"

    model_config = ConfigDict(from_attributes=True)


class ClickResponse(CamelModel):
    id: str
    clicked_at: datetime
    user_ip: Optional[str] = None
    user_agent: Optional[str] = None
    referrer: Optional[str] = None
    country: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class LinkStats(CamelModel):
    total_clicks: int
    clicks_today: int
    clicks_this_week: int
    clicks_this_month: int
    recent_clicks: List[ClickResponse]


class LinkStatsResponse(CamelModel):
    short_name: str
    original_url: str
    custom_name: Optional[str] = None
    created_at: datetime
    stats: LinkStats
