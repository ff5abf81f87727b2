"""
Event catalogue models: events, their seat categories and date slots, and
the per (category, date) seat availability seeded at creation.

Key design decisions:
- `title` is UNIQUE at the DB level; the service pre-check is only a fast path
- `available_seats` has a composite primary key, so one row per pair
- Child rows cascade with their event
"""

from sqlalchemy import (
    Column, Integer, String, Text, Numeric, Date, Time,
    ForeignKey, Index, CheckConstraint, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from eventhub.db.base import Base, TimestampMixin


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    event_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    picture = Column(String(255), nullable=False)  # stored file name, relative to UPLOAD_DIR
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)

    seat_categories = relationship(
        "SeatCategory", back_populates="event", cascade="all, delete-orphan"
    )
    dates = relationship("EventDate", back_populates="event", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("title", name="uq_events_title"),
        # Listing is always newest first
        Index("ix_events_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.event_id}, title={self.title})>"


class SeatCategory(Base):
    __tablename__ = "seat_categories"

    seat_category_id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(
        Integer, ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(50), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    seat_limit = Column(Integer, nullable=False, default=0)

    event = relationship("Event", back_populates="seat_categories")

    __table_args__ = (
        CheckConstraint("price >= 0", name="check_seat_category_price_non_negative"),
        CheckConstraint("seat_limit >= 0", name="check_seat_limit_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<SeatCategory(id={self.seat_category_id}, event={self.event_id}, name={self.name})>"


class EventDate(Base):
    __tablename__ = "event_dates"

    event_date_id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(
        Integer, ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False, index=True
    )
    event_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    event = relationship("Event", back_populates="dates")

    def __repr__(self) -> str:
        return f"<EventDate(id={self.event_date_id}, event={self.event_id}, date={self.event_date})>"


class AvailableSeats(Base):
    __tablename__ = "available_seats"

    seat_category_id = Column(
        Integer,
        ForeignKey("seat_categories.seat_category_id", ondelete="CASCADE"),
        primary_key=True,
    )
    event_date_id = Column(
        Integer,
        ForeignKey("event_dates.event_date_id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    available_seats = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("available_seats >= 0", name="check_available_seats_non_negative"),
    )

    def __repr__(self) -> str:
        return (
            f"<AvailableSeats(category={self.seat_category_id}, "
            f"date={self.event_date_id}, seats={self.available_seats})>"
        )
