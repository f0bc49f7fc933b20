from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import relationship

from linkhub_app.database.connection import Base
from linkhub_app.models._time import utcnow


class Link(Base):
    """
    A short name pointing at one destination URL.

    Only click_count, updated_at and is_active change after creation.
    """
    __tablename__ = "links"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    # unique=True is the last line of defence against two requests racing on one name
    short_name = Column(String(50), unique=True, nullable=False, index=True)
    original_url = Column(String, nullable=False)
    custom_name = Column(String(50), nullable=True, index=True)
    click_count = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=True, index=True)
    user_ip = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)

    clicks = relationship("Click", back_populates="link")
