import logging
from datetime import datetime, timezone
from typing import List, Optional

from linkhub_app.core.link_rules import is_expired
from linkhub_app.schemas.records import HubEntry, HubRecord
from linkhub_app.services.keyspace import Availability, Keyspace
from linkhub_app.services.link_service import ClickContext
from linkhub_app.storage.strategies import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, StorageStrategy

logger = logging.getLogger(__name__)


class HubService:
    """Hubs: one short name, several ordered outbound links"""

    def __init__(self, storage: StorageStrategy, keyspace: Keyspace):
        self.storage = storage
        self.keyspace = keyspace

    def check_availability(self, name: str) -> Availability:
        return self.keyspace.check_availability(name)

    def create_hub(
        self,
        title: str,
        links: List[HubEntry],
        description: Optional[str] = None,
        custom_name: Optional[str] = None,
        expires_in_seconds: Optional[int] = None,
        context: Optional[ClickContext] = None,
    ) -> HubRecord:
        context = context or ClickContext()
        hub_name = self.keyspace.reserve(custom_name)

        hub = self.storage.create_hub(
            hub_name=hub_name,
            title=title,
            links=sorted(links, key=lambda entry: entry.order),
            description=description,
            custom_name=custom_name,
            expires_in_seconds=expires_in_seconds,
            user_ip=context.user_ip,
            user_agent=context.user_agent,
        )
        logger.info("Created hub %s with %d links", hub.hub_name, len(hub.links))
        return hub

    def get_hub(self, hub_name: str) -> Optional[HubRecord]:
        return self.storage.get_active_hub(hub_name)

    def list_hubs(self, limit: int = 50, offset: int = 0) -> List[HubRecord]:
        return self.storage.list_active_hubs(limit=min(limit or DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE), offset=offset)

    def deactivate_hub(self, hub_name: str) -> bool:
        return self.storage.deactivate_hub(hub_name)

    def is_expired(self, hub: HubRecord, now: Optional[datetime] = None) -> bool:
        return is_expired(hub.expires_at, now or datetime.now(timezone.utc))

    def record_visit(self, hub: HubRecord) -> bool:
        """Best-effort: a failed counter update is logged, never raised"""
        try:
            self.storage.increment_hub_clicks(hub.id)
            return True
        except Exception:
            logger.warning("Error recording hub visit for %s (non-fatal)", hub.hub_name, exc_info=True)
            return False
