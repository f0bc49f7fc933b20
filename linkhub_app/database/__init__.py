"""
Database connections.

SQLAlchemy engine/session for the relational backend and a pooled
pymongo client for the MongoDB backend.
"""
