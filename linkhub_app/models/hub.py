from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship

from linkhub_app.database.connection import Base
from linkhub_app.models._time import utcnow


class Hub(Base):
    """A single page bundling several ordered outbound links under one short name"""
    __tablename__ = "hubs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    hub_name = Column(String(50), unique=True, nullable=False, index=True)
    title = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    custom_name = Column(String(50), nullable=True, index=True)
    click_count = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=True, index=True)
    user_ip = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)

    links = relationship(
        "HubLink",
        back_populates="hub",
        order_by="HubLink.order",
        cascade="all, delete-orphan",
    )


class HubLink(Base):
    """One (title, url, order) entry of a hub"""
    __tablename__ = "hub_links"

    id = Column(Integer, primary_key=True, autoincrement=True)
    hub_id = Column(Integer, ForeignKey("hubs.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(100), nullable=False)
    url = Column(String, nullable=False)
    order = Column(Integer, nullable=False)

    hub = relationship("Hub", back_populates="links")
