from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from linkhub_app.database.connection import Base
from linkhub_app.models._time import utcnow


class Click(Base):
    """
    One recorded redirect. Append-only: never updated or deleted,
    only counted and listed for statistics.
    """
    __tablename__ = "clicks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    link_id = Column(Integer, ForeignKey("links.id"), nullable=False, index=True)
    clicked_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    user_ip = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    referrer = Column(String, nullable=True)
    country = Column(String(8), nullable=True)

    link = relationship("Link", back_populates="clicks")
