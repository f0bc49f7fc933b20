from sqlalchemy import Column, String, DateTime

from linkhub_app.database.connection import Base
from linkhub_app.models._time import utcnow


class ShortName(Base):
    """
    Claim on a name in the keyspace shared by links and hubs.

    Written in the same commit as the link or hub that owns it and removed
    when that record is deactivated, so the primary key covers both tables.
    """
    __tablename__ = "short_names"

    name = Column(String(50), primary_key=True)
    kind = Column(String(10), nullable=False)  # "link" or "hub"
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
