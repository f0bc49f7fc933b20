"""
Factory for creating storage instances.
"""

import logging
from enum import Enum
from typing import Optional

from sqlalchemy.orm import Session

from .strategies import StorageStrategy, SQLAlchemyStorage, MongoStorage
from linkhub_app.config import settings

logger = logging.getLogger(__name__)


class StorageBackend(Enum):
    """Available storage backends"""
    SQLALCHEMY = "sqlalchemy"
    MONGODB = "mongodb"


class StorageFactory:
    """
    Simple factory for creating storage instances.

    SQLAlchemy storage is built per request around that request's session.
    MongoDB storage wraps the process-wide pooled client, so one instance
    is cached and reused.
    """

    _mongo_instance: Optional[MongoStorage] = None

    @classmethod
    def create(cls, backend: StorageBackend, db_session: Optional[Session] = None) -> StorageStrategy:
        """
        Create a storage instance.

        Args:
            backend: Type of storage backend (from enum)
            db_session: SQLAlchemy session, required for the SQLAlchemy backend

        Returns:
            StorageStrategy instance
        """
        if backend == StorageBackend.SQLALCHEMY:
            if db_session is None:
                raise ValueError("SQLAlchemy storage needs a database session")
            return SQLAlchemyStorage(db_session)

        if backend == StorageBackend.MONGODB:
            if cls._mongo_instance is None:
                from linkhub_app.database.mongo import get_mongo_database

                cls._mongo_instance = MongoStorage(get_mongo_database())
                logger.info("MongoDB storage initialized")
            return cls._mongo_instance

        raise ValueError(f"Unknown storage backend: {backend}")

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._mongo_instance = None


def init_storage() -> None:
    """Create tables or indexes for the configured backend (run once at startup)"""
    backend = StorageBackend(settings.storage_backend)

    if backend == StorageBackend.SQLALCHEMY:
        from linkhub_app.database.connection import SessionLocal

        db = SessionLocal()
        try:
            StorageFactory.create(backend, db_session=db).init_schema()
        finally:
            db.close()
    else:
        StorageFactory.create(backend).init_schema()

    logger.info("Storage backend %r initialized", backend.value)
