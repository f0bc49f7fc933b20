"""
Storage module for links, hubs and click events.

This module implements the Strategy Pattern for pluggable persistence:
SQLAlchemy (SQLite / PostgreSQL) or MongoDB.
"""

from .strategies import StorageStrategy, SQLAlchemyStorage, MongoStorage, MAX_PAGE_SIZE
from .factory import StorageFactory, StorageBackend, init_storage

__all__ = [
    "StorageStrategy",
    "SQLAlchemyStorage",
    "MongoStorage",
    "MAX_PAGE_SIZE",
    "StorageFactory",
    "StorageBackend",
    "init_storage",
]
