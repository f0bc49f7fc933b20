"""
SQLAlchemy models for the relational storage backend.

Links and hubs share one short-name keyspace but live in separate tables;
short_names holds the active claims across both. Click events are
append-only rows pointing at a link.
"""

from .link import Link
from .hub import Hub, HubLink
from .click import Click
from .short_name import ShortName

__all__ = ["Link", "Hub", "HubLink", "Click", "ShortName"]
