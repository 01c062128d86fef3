"""
Event catalog: venues, events and their time-boxed sessions.

Key design decisions:
- `session_balance_capacity` is the hard seat ceiling per session; seats in use
  are derived from Entry order lines, never stored
- `version` on sessions is bumped on every seat claim so concurrent
  registrations for the same session detect each other (optimistic locking)
- Sessions are ordered by date then start time wherever an event loads them
"""

from sqlalchemy import (
    Column, Integer, String, Date, Time, ForeignKey, Index, CheckConstraint, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from event_registration.db.base import Base, TimestampMixin


class Venue(Base, TimestampMixin):
    __tablename__ = "venues"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    address = Column(String(500), nullable=True)

    events = relationship("Event", back_populates="venue")

    def __repr__(self) -> str:
        return f"<Venue(id={self.id}, name={self.name})>"


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    event_name = Column(String(255), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=True)

    venue = relationship("Venue", back_populates="events")
    sessions = relationship(
        "EventSession",
        back_populates="event",
        lazy="selectin",
        order_by="[EventSession.session_date, EventSession.start_time]",
    )

    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="check_event_dates_ordered"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, name={self.event_name})>"


class EventSession(Base, TimestampMixin):
    __tablename__ = "event_sessions"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    session_name = Column(String(255), nullable=False)
    session_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    session_balance_capacity = Column(Integer, nullable=False)
    session_detail = Column(String(1000), nullable=True)

    # Optimistic locking version counter
    version = Column(Integer, nullable=False, default=1)

    event = relationship("Event", back_populates="sessions")
    product_maps = relationship("ProductSessionMap", back_populates="session", lazy="selectin")

    __table_args__ = (
        CheckConstraint("session_balance_capacity >= 0", name="check_session_capacity_non_negative"),
        Index("ix_event_sessions_event_date", "event_id", "session_date"),
    )

    @property
    def product_ids(self) -> set[int]:
        return {m.product_id for m in self.product_maps}

    def __repr__(self) -> str:
        return (
            f"<EventSession(id={self.id}, event={self.event_id}, "
            f"capacity={self.session_balance_capacity})>"
        )


class ProductSessionMap(Base, TimestampMixin):
    __tablename__ = "product_session_maps"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("event_sessions.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)

    session = relationship("EventSession", back_populates="product_maps")
    product = relationship("Product", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("session_id", "product_id", name="uq_session_product"),
    )
