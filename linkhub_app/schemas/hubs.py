from datetime import datetime
from typing import List, Literal, Optional

from pydantic import ConfigDict, Field, computed_field, field_validator

from linkhub_app.config import settings
from linkhub_app.schemas.common import CamelModel, normalize_custom_name, validate_http_url


class HubLinkPayload(CamelModel):
    title: str = Field(..., min_length=1, max_length=100)
    url: str
    order: int = Field(..., ge=0)

    @field_validator("url")
    @classmethod
    def check_url(cls, value: str) -> str:
        return validate_http_url(value)


class CreateHubRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    links: List[HubLinkPayload] = Field(..., min_length=1, max_length=10)
    custom_name: Optional[str] = None
    expires_in_seconds: Optional[int] = Field(None, gt=0)

    @field_validator("custom_name")
    @classmethod
    def check_custom_name(cls, value: Optional[str]) -> Optional[str]:
        return normalize_custom_name(value)


class HubLinkResponse(CamelModel):
    title: str
    url: str
    order: int

    model_config = ConfigDict(from_attributes=True)


class HubResponse(CamelModel):
    id: str
    hub_name: str
    title: str
    description: Optional[str] = None
    links: List[HubLinkResponse]
    custom_name: Optional[str] = None
    click_count: int
    created_at: datetime
    expires_at: Optional[datetime] = None

    @computed_field(alias="hubUrl")
    @property
    def hub_url(self) -> str:
        return f"{settings.base_url.rstrip('/')}/h/{self.hub_name}"

    model_config = ConfigDict(from_attributes=True)


class HubPageResponse(CamelModel):
    """Payload served on the public hub path for client-side rendering"""
    success: bool = True
    type: Literal["hub"] = "hub"
    data: HubResponse


class HubStats(CamelModel):
    total_clicks: int


class HubStatsResponse(CamelModel):
    hub_name: str
    title: str
    description: Optional[str] = None
    created_at: datetime
    stats: HubStats
