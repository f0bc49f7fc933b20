from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything we write is UTC
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_expired(expires_at: Optional[datetime], now: datetime) -> bool:
    expires_at = as_utc(expires_at)
    return expires_at is not None and as_utc(now) >= expires_at


def expiry_from(created_at: datetime, expires_in_seconds: Optional[int]) -> Optional[datetime]:
    if expires_in_seconds is None:
        return None
    return as_utc(created_at) + timedelta(seconds=expires_in_seconds)


def click_windows(now: datetime) -> Dict[str, datetime]:
    """
    Lower bounds of the statistics windows.

    - today: UTC midnight
    - week: rolling, 7 days back from now
    - month: first day of the current UTC calendar month
    """
    now = as_utc(now)
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return {
        "today": today,
        "week": now - timedelta(days=7),
        "month": today.replace(day=1),
    }
