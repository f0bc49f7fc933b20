"""
Storage strategies using Strategy Pattern.

Allows switching between persistence backends for links, hubs and clicks:
- SQLAlchemy: SQLite for development/tests, PostgreSQL in production
- MongoDB: document store, one collection per entity
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError
from sqlalchemy import delete, func, select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from linkhub_app.core.errors import NameUnavailableError
from linkhub_app.core.link_rules import as_utc, expiry_from
from linkhub_app.database.connection import Base
from linkhub_app.models import Click, Hub, HubLink, Link, ShortName
from linkhub_app.models._time import utcnow
from linkhub_app.schemas.records import ClickRecord, HubEntry, HubRecord, LinkRecord

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100
NAME_TAKEN = "This name is already taken"


class StorageStrategy(ABC):
    """
    Abstract base class for storage strategies.

    Links and hubs live in two collections but share one short-name
    keyspace: name_in_use() answers for both at once.

    Every method is synchronous; FastAPI runs the sync routes that call
    them in its threadpool.
    """

    @abstractmethod
    def init_schema(self) -> None:
        """Create tables / indexes if they don't exist"""
        pass

    @abstractmethod
    def ping(self) -> bool:
        """True if the store answers"""
        pass

    @abstractmethod
    def name_in_use(self, name: str) -> bool:
        """True if an active link or an active hub holds this name"""
        pass

    # Links

    @abstractmethod
    def create_link(
        self,
        short_name: str,
        original_url: str,
        custom_name: Optional[str] = None,
        expires_in_seconds: Optional[int] = None,
        user_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> LinkRecord:
        """
        Insert a link and claim its name in the shared keyspace.

        created_at and expires_at (created_at + expires_in_seconds) come
        from the same clock reading.

        Raises:
            NameUnavailableError: the store's unique constraints rejected short_name,
                either as a link name or as a name already claimed by a hub
        """
        pass

    @abstractmethod
    def get_active_link(self, short_name: str) -> Optional[LinkRecord]:
        pass

    @abstractmethod
    def list_active_links(self, limit: int = 50, offset: int = 0) -> List[LinkRecord]:
        """Newest first, never more than MAX_PAGE_SIZE"""
        pass

    @abstractmethod
    def increment_link_clicks(self, link_id: str) -> None:
        pass

    @abstractmethod
    def deactivate_link(self, short_name: str) -> bool:
        """Soft delete that also releases the name claim. False if there was no active link"""
        pass

    # Clicks

    @abstractmethod
    def create_click(
        self,
        link_id: str,
        user_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
        referrer: Optional[str] = None,
        country: Optional[str] = None,
    ) -> ClickRecord:
        pass

    @abstractmethod
    def count_clicks(self, link_id: str, since: Optional[datetime] = None) -> int:
        pass

    @abstractmethod
    def recent_clicks(self, link_id: str, limit: int = 10) -> List[ClickRecord]:
        """Newest first"""
        pass

    # Hubs

    @abstractmethod
    def create_hub(
        self,
        hub_name: str,
        title: str,
        links: List[HubEntry],
        description: Optional[str] = None,
        custom_name: Optional[str] = None,
        expires_in_seconds: Optional[int] = None,
        user_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> HubRecord:
        """Insert a hub with its entries and claim its name, like create_link"""
        pass

    @abstractmethod
    def get_active_hub(self, hub_name: str) -> Optional[HubRecord]:
        pass

    @abstractmethod
    def list_active_hubs(self, limit: int = 50, offset: int = 0) -> List[HubRecord]:
        pass

    @abstractmethod
    def increment_hub_clicks(self, hub_id: str) -> None:
        pass

    @abstractmethod
    def deactivate_hub(self, hub_name: str) -> bool:
        pass


def _sorted_entries(entries) -> List[HubEntry]:
    return sorted(
        (HubEntry(title=e.title, url=e.url, order=e.order) for e in entries),
        key=lambda entry: entry.order,
    )


class SQLAlchemyStorage(StorageStrategy):
    """
    Relational implementation over one SQLAlchemy session.

    One instance per request: the session comes from get_db().
    """

    def __init__(self, db: Session):
        self.db = db

    def init_schema(self) -> None:
        Base.metadata.create_all(bind=self.db.get_bind())
        logger.info("SQL schema ready")

    def ping(self) -> bool:
        try:
            self.db.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error("Database ping failed: %s", e)
            return False

    def name_in_use(self, name: str) -> bool:
        link_hit = self.db.execute(
            select(Link.id).where(Link.short_name == name, Link.is_active.is_(True)).limit(1)
        ).first()
        if link_hit is not None:
            return True

        hub_hit = self.db.execute(
            select(Hub.id).where(Hub.hub_name == name, Hub.is_active.is_(True)).limit(1)
        ).first()
        return hub_hit is not None

    # Links

    @staticmethod
    def _link_record(link: Link) -> LinkRecord:
        return LinkRecord(
            id=str(link.id),
            short_name=link.short_name,
            original_url=link.original_url,
            custom_name=link.custom_name,
            click_count=link.click_count or 0,
            is_active=link.is_active,
            created_at=as_utc(link.created_at),
            updated_at=as_utc(link.updated_at),
            expires_at=as_utc(link.expires_at),
        )

    def _commit_new(self, row, name: str, kind: str) -> None:
        # The record and its name claim land in one commit; either constraint failing rejects both
        self.db.add(ShortName(name=name, kind=kind, created_at=row.created_at))
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise NameUnavailableError(NAME_TAKEN)
        self.db.refresh(row)

    def _release_name(self, name: str, kind: str) -> None:
        self.db.execute(delete(ShortName).where(ShortName.name == name, ShortName.kind == kind))

    def create_link(
        self,
        short_name: str,
        original_url: str,
        custom_name: Optional[str] = None,
        expires_in_seconds: Optional[int] = None,
        user_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> LinkRecord:
        now = utcnow()
        link = Link(
            short_name=short_name,
            original_url=original_url,
            custom_name=custom_name,
            created_at=now,
            updated_at=now,
            expires_at=expiry_from(now, expires_in_seconds),
            user_ip=user_ip,
            user_agent=user_agent,
            click_count=0,
            is_active=True,
        )
        self._commit_new(link, short_name, "link")
        return self._link_record(link)

    def get_active_link(self, short_name: str) -> Optional[LinkRecord]:
        link = self.db.query(Link).filter(
            Link.short_name == short_name,
            Link.is_active.is_(True)
        ).first()
        return self._link_record(link) if link else None

    def list_active_links(self, limit: int = 50, offset: int = 0) -> List[LinkRecord]:
        links = (
            self.db.query(Link)
            .filter(Link.is_active.is_(True))
            .order_by(Link.created_at.desc(), Link.id.desc())
            .offset(offset)
            .limit(min(limit, MAX_PAGE_SIZE))
            .all()
        )
        return [self._link_record(link) for link in links]

    def increment_link_clicks(self, link_id: str) -> None:
        self.db.execute(
            update(Link)
            .where(Link.id == int(link_id))
            .values(click_count=Link.click_count + 1, updated_at=utcnow())
        )
        self.db.commit()

    def deactivate_link(self, short_name: str) -> bool:
        result = self.db.execute(
            update(Link)
            .where(Link.short_name == short_name, Link.is_active.is_(True))
            .values(is_active=False, updated_at=utcnow())
        )
        if result.rowcount > 0:
            self._release_name(short_name, "link")
        self.db.commit()
        return result.rowcount > 0

    # Clicks

    @staticmethod
    def _click_record(click: Click) -> ClickRecord:
        return ClickRecord(
            id=str(click.id),
            link_id=str(click.link_id),
            clicked_at=as_utc(click.clicked_at),
            user_ip=click.user_ip,
            user_agent=click.user_agent,
            referrer=click.referrer,
            country=click.country,
        )

    def create_click(
        self,
        link_id: str,
        user_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
        referrer: Optional[str] = None,
        country: Optional[str] = None,
    ) -> ClickRecord:
        click = Click(
            link_id=int(link_id),
            user_ip=user_ip,
            user_agent=user_agent,
            referrer=referrer,
            country=country,
        )
        self.db.add(click)
        self.db.commit()
        self.db.refresh(click)
        return self._click_record(click)

    def count_clicks(self, link_id: str, since: Optional[datetime] = None) -> int:
        query = select(func.count(Click.id)).where(Click.link_id == int(link_id))
        if since is not None:
            query = query.where(Click.clicked_at >= since)
        return self.db.execute(query).scalar_one()

    def recent_clicks(self, link_id: str, limit: int = 10) -> List[ClickRecord]:
        clicks = (
            self.db.query(Click)
            .filter(Click.link_id == int(link_id))
            .order_by(Click.clicked_at.desc(), Click.id.desc())
            .limit(limit)
            .all()
        )
        return [self._click_record(click) for click in clicks]

    # Hubs

    @staticmethod
    def _hub_record(hub: Hub) -> HubRecord:
        return HubRecord(
            id=str(hub.id),
            hub_name=hub.hub_name,
            title=hub.title,
            description=hub.description,
            links=_sorted_entries(hub.links),
            custom_name=hub.custom_name,
            click_count=hub.click_count or 0,
            is_active=hub.is_active,
            created_at=as_utc(hub.created_at),
            updated_at=as_utc(hub.updated_at),
            expires_at=as_utc(hub.expires_at),
        )

    def create_hub(
        self,
        hub_name: str,
        title: str,
        links: List[HubEntry],
        description: Optional[str] = None,
        custom_name: Optional[str] = None,
        expires_in_seconds: Optional[int] = None,
        user_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> HubRecord:
        now = utcnow()
        hub = Hub(
            hub_name=hub_name,
            title=title,
            description=description,
            custom_name=custom_name,
            created_at=now,
            updated_at=now,
            expires_at=expiry_from(now, expires_in_seconds),
            user_ip=user_ip,
            user_agent=user_agent,
            click_count=0,
            is_active=True,
            links=[
                HubLink(title=entry.title, url=entry.url, order=entry.order)
                for entry in _sorted_entries(links)
            ],
        )
        self._commit_new(hub, hub_name, "hub")
        return self._hub_record(hub)

    def _active_hubs(self):
        return (
            self.db.query(Hub)
            .options(selectinload(Hub.links))
            .filter(Hub.is_active.is_(True))
        )

    def get_active_hub(self, hub_name: str) -> Optional[HubRecord]:
        hub = self._active_hubs().filter(Hub.hub_name == hub_name).first()
        return self._hub_record(hub) if hub else None

    def list_active_hubs(self, limit: int = 50, offset: int = 0) -> List[HubRecord]:
        hubs = (
            self._active_hubs()
            .order_by(Hub.created_at.desc(), Hub.id.desc())
            .offset(offset)
            .limit(min(limit, MAX_PAGE_SIZE))
            .all()
        )
        return [self._hub_record(hub) for hub in hubs]

    def increment_hub_clicks(self, hub_id: str) -> None:
        self.db.execute(
            update(Hub)
            .where(Hub.id == int(hub_id))
            .values(click_count=Hub.click_count + 1, updated_at=utcnow())
        )
        self.db.commit()

    def deactivate_hub(self, hub_name: str) -> bool:
        result = self.db.execute(
            update(Hub)
            .where(Hub.hub_name == hub_name, Hub.is_active.is_(True))
            .values(is_active=False, updated_at=utcnow())
        )
        if result.rowcount > 0:
            self._release_name(hub_name, "hub")
        self.db.commit()
        return result.rowcount > 0


class MongoStorage(StorageStrategy):
    """
    MongoDB implementation.

    Collections:
    - links:  {shortName, originalUrl, customName, clickCount, isActive, createdAt, updatedAt, expiresAt, userIp, userAgent}
    - hubs:   {hubName, title, description, links: [{title, url, order}], customName, clickCount, isActive, ...}
    - clicks: {urlId, clickedAt, userIp, userAgent, referrer, country}
    - names:  {_id: name, kind, createdAt}, one per active link or hub

    The unique indexes on shortName / hubName and the _id of names are what
    actually stop two concurrent requests from claiming the same name in
    either collection.
    """

    def __init__(self, database: Database):
        self.database = database
        self.links = database["links"]
        self.hubs = database["hubs"]
        self.clicks = database["clicks"]
        self.names = database["names"]

    def init_schema(self) -> None:
        self.links.create_index([("shortName", ASCENDING)], unique=True)
        self.links.create_index([("customName", ASCENDING)], sparse=True)
        self.links.create_index([("isActive", ASCENDING)])
        self.links.create_index([("createdAt", DESCENDING)])
        self.links.create_index([("expiresAt", ASCENDING)])

        self.hubs.create_index([("hubName", ASCENDING)], unique=True)
        self.hubs.create_index([("customName", ASCENDING)], sparse=True)
        self.hubs.create_index([("isActive", ASCENDING)])
        self.hubs.create_index([("createdAt", DESCENDING)])
        self.hubs.create_index([("expiresAt", ASCENDING)])

        self.clicks.create_index([("urlId", ASCENDING), ("clickedAt", DESCENDING)])
        logger.info("MongoDB indexes ready")

    def ping(self) -> bool:
        try:
            self.database.client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.error("MongoDB ping failed: %s", e)
            return False

    def name_in_use(self, name: str) -> bool:
        if self.links.find_one({"shortName": name, "isActive": True}, {"_id": 1}):
            return True
        return self.hubs.find_one({"hubName": name, "isActive": True}, {"_id": 1}) is not None

    def _claim_name(self, name: str, kind: str, now: datetime) -> None:
        try:
            self.names.insert_one({"_id": name, "kind": kind, "createdAt": now})
        except DuplicateKeyError:
            raise NameUnavailableError(NAME_TAKEN)

    def _release_name(self, name: str, kind: str) -> None:
        self.names.delete_one({"_id": name, "kind": kind})

    def _insert(self, collection, document: dict, name: str, kind: str) -> dict:
        """
        Claim the name, then insert the record.

        No transactions: if the record insert loses on its own unique index
        the claim is removed again.
        """
        self._claim_name(name, kind, document["createdAt"])
        try:
            result = collection.insert_one(document)
        except DuplicateKeyError:
            self._release_name(name, kind)
            raise NameUnavailableError(NAME_TAKEN)
        document["_id"] = result.inserted_id
        return document

    # Links

    @staticmethod
    def _link_record(doc: dict) -> LinkRecord:
        return LinkRecord(
            id=str(doc["_id"]),
            short_name=doc["shortName"],
            original_url=doc["originalUrl"],
            custom_name=doc.get("customName"),
            click_count=doc.get("clickCount", 0),
            is_active=doc.get("isActive", True),
            created_at=as_utc(doc["createdAt"]),
            updated_at=as_utc(doc.get("updatedAt")),
            expires_at=as_utc(doc.get("expiresAt")),
        )

    def create_link(
        self,
        short_name: str,
        original_url: str,
        custom_name: Optional[str] = None,
        expires_in_seconds: Optional[int] = None,
        user_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> LinkRecord:
        now = utcnow()
        document = {
            "shortName": short_name,
            "originalUrl": original_url,
            "clickCount": 0,
            "isActive": True,
            "createdAt": now,
            "updatedAt": now,
        }
        # Optional fields are left out rather than stored as null (sparse indexes)
        optional = {
            "customName": custom_name,
            "expiresAt": expiry_from(now, expires_in_seconds),
            "userIp": user_ip,
            "userAgent": user_agent,
        }
        document.update({key: value for key, value in optional.items() if value is not None})
        return self._link_record(self._insert(self.links, document, short_name, "link"))

    def get_active_link(self, short_name: str) -> Optional[LinkRecord]:
        doc = self.links.find_one({"shortName": short_name, "isActive": True})
        return self._link_record(doc) if doc else None

    def list_active_links(self, limit: int = 50, offset: int = 0) -> List[LinkRecord]:
        cursor = (
            self.links.find({"isActive": True})
            .sort("createdAt", DESCENDING)
            .skip(offset)
            .limit(min(limit, MAX_PAGE_SIZE))
        )
        return [self._link_record(doc) for doc in cursor]

    def increment_link_clicks(self, link_id: str) -> None:
        self.links.update_one(
            {"_id": ObjectId(link_id)},
            {"$inc": {"clickCount": 1}, "$set": {"updatedAt": utcnow()}},
        )

    def deactivate_link(self, short_name: str) -> bool:
        doc = self.links.find_one_and_update(
            {"shortName": short_name, "isActive": True},
            {"$set": {"isActive": False, "updatedAt": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            return False
        self._release_name(short_name, "link")
        return True

    # Clicks

    @staticmethod
    def _click_record(doc: dict) -> ClickRecord:
        return ClickRecord(
            id=str(doc["_id"]),
            link_id=str(doc["urlId"]),
            clicked_at=as_utc(doc["clickedAt"]),
            user_ip=doc.get("userIp"),
            user_agent=doc.get("userAgent"),
            referrer=doc.get("referrer"),
            country=doc.get("country"),
        )

    def create_click(
        self,
        link_id: str,
        user_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
        referrer: Optional[str] = None,
        country: Optional[str] = None,
    ) -> ClickRecord:
        document = {
            "urlId": ObjectId(link_id),
            "clickedAt": utcnow(),
            "userIp": user_ip,
            "userAgent": user_agent,
            "referrer": referrer,
            "country": country,
        }
        result = self.clicks.insert_one(document)
        document["_id"] = result.inserted_id
        return self._click_record(document)

    def count_clicks(self, link_id: str, since: Optional[datetime] = None) -> int:
        query: dict = {"urlId": ObjectId(link_id)}
        if since is not None:
            query["clickedAt"] = {"$gte": since}
        return self.clicks.count_documents(query)

    def recent_clicks(self, link_id: str, limit: int = 10) -> List[ClickRecord]:
        cursor = (
            self.clicks.find({"urlId": ObjectId(link_id)})
            .sort("clickedAt", DESCENDING)
            .limit(limit)
        )
        return [self._click_record(doc) for doc in cursor]

    # Hubs

    @staticmethod
    def _hub_record(doc: dict) -> HubRecord:
        return HubRecord(
            id=str(doc["_id"]),
            hub_name=doc["hubName"],
            title=doc["title"],
            description=doc.get("description"),
            links=_sorted_entries(HubEntry(**entry) for entry in doc.get("links", [])),
            custom_name=doc.get("customName"),
            click_count=doc.get("clickCount", 0),
            is_active=doc.get("isActive", True),
            created_at=as_utc(doc["createdAt"]),
            updated_at=as_utc(doc.get("updatedAt")),
            expires_at=as_utc(doc.get("expiresAt")),
        )

    def create_hub(
        self,
        hub_name: str,
        title: str,
        links: List[HubEntry],
        description: Optional[str] = None,
        custom_name: Optional[str] = None,
        expires_in_seconds: Optional[int] = None,
        user_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> HubRecord:
        now = utcnow()
        document = {
            "hubName": hub_name,
            "title": title,
            "links": [entry.model_dump() for entry in _sorted_entries(links)],
            "clickCount": 0,
            "isActive": True,
            "createdAt": now,
            "updatedAt": now,
        }
        optional = {
            "description": description,
            "customName": custom_name,
            "expiresAt": expiry_from(now, expires_in_seconds),
            "userIp": user_ip,
            "userAgent": user_agent,
        }
        document.update({key: value for key, value in optional.items() if value is not None})
        return self._hub_record(self._insert(self.hubs, document, hub_name, "hub"))

    def get_active_hub(self, hub_name: str) -> Optional[HubRecord]:
        doc = self.hubs.find_one({"hubName": hub_name, "isActive": True})
        return self._hub_record(doc) if doc else None

    def list_active_hubs(self, limit: int = 50, offset: int = 0) -> List[HubRecord]:
        cursor = (
            self.hubs.find({"isActive": True})
            .sort("createdAt", DESCENDING)
            .skip(offset)
            .limit(min(limit, MAX_PAGE_SIZE))
        )
        return [self._hub_record(doc) for doc in cursor]

    def increment_hub_clicks(self, hub_id: str) -> None:
        self.hubs.update_one(
            {"_id": ObjectId(hub_id)},
            {"$inc": {"clickCount": 1}, "$set": {"updatedAt": utcnow()}},
        )

    def deactivate_hub(self, hub_name: str) -> bool:
        doc = self.hubs.find_one_and_update(
            {"hubName": hub_name, "isActive": True},
            {"$set": {"isActive": False, "updatedAt": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            return False
        self._release_name(hub_name, "hub")
        return True
