import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from linkhub_app.core.link_rules import click_windows, is_expired
from linkhub_app.schemas.records import ClickRecord, LinkRecord
from linkhub_app.services.keyspace import Availability, Keyspace
from linkhub_app.storage.strategies import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, StorageStrategy

logger = logging.getLogger(__name__)

RECENT_CLICKS_LIMIT = 10


@dataclass(frozen=True)
class ClickContext:
    """Request metadata attached to a click or to a newly created record"""
    user_ip: Optional[str] = None
    user_agent: Optional[str] = None
    referrer: Optional[str] = None
    country: Optional[str] = None


@dataclass(frozen=True)
class LinkStatistics:
    total_clicks: int
    clicks_today: int
    clicks_this_week: int
    clicks_this_month: int
    recent_clicks: List[ClickRecord]


class LinkService:
    """
    Link service with dependency injection for storage and keyspace.

    Storage and keyspace are injected (not created internally), so tests can
    hand in any StorageStrategy.
    """

    def __init__(self, storage: StorageStrategy, keyspace: Keyspace):
        self.storage = storage
        self.keyspace = keyspace

    def check_availability(self, name: str) -> Availability:
        return self.keyspace.check_availability(name)

    def create_link(
        self,
        original_url: str,
        custom_name: Optional[str] = None,
        expires_in_seconds: Optional[int] = None,
        context: Optional[ClickContext] = None,
    ) -> LinkRecord:
        """
        Create a new short link.

        Always creates a new record even if the destination already has one,
        so different sources can be tracked separately.

        Raises:
            NameUnavailableError: custom name rejected or lost a race on insert
            NameGenerationError: no free random name
        """
        context = context or ClickContext()
        short_name = self.keyspace.reserve(custom_name)

        link = self.storage.create_link(
            short_name=short_name,
            original_url=original_url,
            custom_name=custom_name,
            expires_in_seconds=expires_in_seconds,
            user_ip=context.user_ip,
            user_agent=context.user_agent,
        )
        logger.info("Created link %s -> %s", link.short_name, link.original_url)
        return link

    def get_link(self, short_name: str) -> Optional[LinkRecord]:
        return self.storage.get_active_link(short_name)

    def list_links(self, limit: int = 50, offset: int = 0) -> List[LinkRecord]:
        return self.storage.list_active_links(limit=min(limit or DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE), offset=offset)

    def deactivate_link(self, short_name: str) -> bool:
        return self.storage.deactivate_link(short_name)

    def is_expired(self, link: LinkRecord, now: Optional[datetime] = None) -> bool:
        return is_expired(link.expires_at, now or datetime.now(timezone.utc))

    def record_click(self, link: LinkRecord, context: ClickContext) -> bool:
        """
        Best-effort click tracking: store the click event, then bump the counter.

        The two writes are not atomic. Any failure is logged and swallowed so
        the redirect itself never fails because of analytics.
        """
        try:
            self.storage.create_click(
                link_id=link.id,
                user_ip=context.user_ip,
                user_agent=context.user_agent,
                referrer=context.referrer,
                country=context.country,
            )
            self.storage.increment_link_clicks(link.id)
            return True
        except Exception:
            logger.warning("Error recording click for %s (non-fatal)", link.short_name, exc_info=True)
            return False

    def get_stats(self, link: LinkRecord, now: Optional[datetime] = None) -> LinkStatistics:
        windows = click_windows(now or datetime.now(timezone.utc))
        return LinkStatistics(
            total_clicks=self.storage.count_clicks(link.id),
            clicks_today=self.storage.count_clicks(link.id, since=windows["today"]),
            clicks_this_week=self.storage.count_clicks(link.id, since=windows["week"]),
            clicks_this_month=self.storage.count_clicks(link.id, since=windows["month"]),
            recent_clicks=self.storage.recent_clicks(link.id, limit=RECENT_CLICKS_LIMIT),
        )
