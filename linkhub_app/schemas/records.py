"""
Storage-neutral records.

Both storage strategies return these instead of ORM objects or raw Mongo
documents, so services and routes never depend on the backend in use.
Ids are strings: integer primary keys for SQL, ObjectId hex for MongoDB.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class LinkRecord(BaseModel):
    id: str
    short_name: str
    original_url: str
    custom_name: Optional[str] = None
    click_count: int = 0
    is_active: bool = True
    created_at: datetime
    updated_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)


class HubEntry(BaseModel):
    title: str
    url: str
    order: int

    model_config = ConfigDict(frozen=True)


class HubRecord(BaseModel):
    id: str
    hub_name: str
    title: str
    description: Optional[str] = None
    links: List[HubEntry] = []
    custom_name: Optional[str] = None
    click_count: int = 0
    is_active: bool = True
    created_at: datetime
    updated_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)


class ClickRecord(BaseModel):
    id: str
    link_id: str
    clicked_at: datetime
    user_ip: Optional[str] = None
    user_agent: Optional[str] = None
    referrer: Optional[str] = None
    country: Optional[str] = None

    model_config = ConfigDict(frozen=True)
