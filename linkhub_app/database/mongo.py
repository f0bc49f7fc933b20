"""
MongoDB client (one pooled client per process).
"""

import logging
from functools import lru_cache

from pymongo import MongoClient
from pymongo.database import Database

from linkhub_app.config import settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_mongo_client() -> MongoClient:
    """
    Create the process-wide MongoClient.

    tz_aware=True makes pymongo hand back timezone-aware UTC datetimes,
    matching what the SQLAlchemy backend produces.
    """
    client = MongoClient(
        settings.resolved_mongo_uri,
        maxPoolSize=settings.mongo_max_pool_size,
        serverSelectionTimeoutMS=settings.mongo_server_selection_timeout_ms,
        tz_aware=True,
    )
    logger.info("MongoDB client created for database %r", settings.mongo_database)
    return client


def get_mongo_database() -> Database:
    """Database named in the URI, or settings.mongo_database when the URI has none"""
    return get_mongo_client().get_default_database(default=settings.mongo_database)
