"""
Event service: creating events with their seating and listing them.

CREATE SEQUENCE
===============

  1. Role check        - the caller's AuthContext must be admin/owner
                         (the route dependency already enforced this)
  2. Duplicate title   - SELECT by exact title, fast path only
  3. Image             - validate, re-encode, write to UPLOAD_DIR
  4. Event row         - created_at assigned by the database
  5. Seat categories   - one row each, seat_limit from SeatTier
  6. Event dates       - one row per date/time slot
  7. Seat seeding      - re-read 5 and 6, one available_seats row per
                         (category, date) pair seeded with seat_limit

Steps 4-7 share the request session's transaction and are committed once.
Any failure rolls the whole event back and removes the stored picture, so
callers see either a complete event or nothing.

The title pre-check races with concurrent creates. The UNIQUE constraint on
events.title is the real guarantee: an IntegrityError at flush/commit is
reported as the same DuplicateTitleError.
"""

from enum import IntEnum
from typing import Any

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.config import get_settings
from eventhub.core.errors import (
    AppError, DatabaseError, DuplicateTitleError, ForbiddenError, StorageWriteError,
)
from eventhub.core.logging import get_logger
from eventhub.core.metrics import (
    event_creation_latency, record_db_operation, record_event_creation,
)
from eventhub.core.security import AuthContext
from eventhub.models.event import Event, SeatCategory, EventDate, AvailableSeats
from eventhub.schemas.event import EventCreate
from eventhub.services import media_service

logger = get_logger(__name__)
settings = get_settings()


class SeatTier(IntEnum):
    """Seat capacity per category name. Names match exactly, case included."""

    Premium = 50
    Standard = 100
    Economy = 150


def seat_limit_for(category_name: str) -> int:
    """Capacity for a category; unknown names get 0 seats."""
    try:
        return SeatTier[category_name].value
    except KeyError:
        return 0


async def title_exists(db: AsyncSession, title: str) -> bool:
    result = await db.execute(select(Event.event_id).where(Event.title == title))
    record_db_operation("read")
    return result.first() is not None


async def _seed_available_seats(db: AsyncSession, event_id: int) -> int:
    """Insert one available_seats row per (category, date) of the event."""
    categories = (
        await db.execute(
            select(SeatCategory.seat_category_id, SeatCategory.seat_limit)
            .where(SeatCategory.event_id == event_id)
        )
    ).all()
    dates = (
        await db.execute(
            select(EventDate.event_date_id).where(EventDate.event_id == event_id)
        )
    ).scalars().all()

    rows = [
        AvailableSeats(
            seat_category_id=category.seat_category_id,
            event_date_id=event_date_id,
            available_seats=category.seat_limit,
        )
        for category in categories
        for event_date_id in dates
    ]
    db.add_all(rows)
    await db.flush()
    return len(rows)


async def _insert_event(db: AsyncSession, data: EventCreate, picture: str) -> Event:
    event = Event(
        title=data.title,
        picture=picture,
        description=data.description,
        location=data.location,
    )
    db.add(event)
    await db.flush()

    for category in data.categories:
        db.add(SeatCategory(
            event_id=event.event_id,
            name=category.name,
            price=category.price,
            seat_limit=seat_limit_for(category.name),
        ))

    for slot in data.dates:
        db.add(EventDate(
            event_id=event.event_id,
            event_date=slot.event_date,
            start_time=slot.start_time,
            end_time=slot.end_time,
        ))
    await db.flush()

    seeded = await _seed_available_seats(db, event.event_id)
    record_db_operation("write")
    logger.debug("seats_seeded", event_id=event.event_id, rows=seeded)
    return event


async def create_event(
    db: AsyncSession,
    auth: AuthContext,
    data: EventCreate,
    upload: Any,
) -> Event:
    """
    Create an event with its categories, dates and seeded seat availability.

    Raises:
        ForbiddenError: caller is not an admin or owner.
        DuplicateTitleError: an event with this title already exists.
        InvalidImageError: the picture failed validation.
        StorageWriteError: the picture could not be written.
        DatabaseError: any other database failure (details logged only).
    """
    if not auth.can_manage_events:
        record_event_creation("rejected")
        raise ForbiddenError()

    with event_creation_latency.time():
        try:
            if await title_exists(db, data.title):
                logger.info("event_title_taken", title=data.title)
                raise DuplicateTitleError()

            image = await media_service.validate_image(upload, settings.MAX_UPLOAD_BYTES)
            picture = await media_service.store_image(image, settings.UPLOAD_DIR)
        except DuplicateTitleError:
            record_event_creation("duplicate")
            raise
        except StorageWriteError:
            record_event_creation("error")
            raise
        except AppError:
            record_event_creation("rejected")
            raise
        except SQLAlchemyError as e:
            logger.error("event_duplicate_check_failed", error=str(e))
            record_event_creation("error")
            raise DatabaseError("Server error inserting event")

        try:
            event = await _insert_event(db, data, picture)
            await db.commit()
        except IntegrityError as e:
            await _abandon(db, picture, error=e)
            if _is_title_conflict(e):
                record_event_creation("duplicate")
                raise DuplicateTitleError()
            record_event_creation("error")
            raise DatabaseError("Server error inserting event")
        except SQLAlchemyError as e:
            await _abandon(db, picture, error=e)
            record_event_creation("error")
            raise DatabaseError("Server error inserting event")
        except BaseException as e:
            # Cancelled request or a bug: clean up and re-raise unchanged
            await _abandon(db, picture, error=e)
            record_event_creation("error")
            raise

    record_event_creation("created")
    logger.info(
        "event_created",
        event_id=event.event_id,
        title=event.title,
        created_by=auth.email,
        categories=len(data.categories),
        dates=len(data.dates),
    )
    return event


async def _abandon(db: AsyncSession, picture: str, error: BaseException) -> None:
    """
    Roll back a failed create and drop the picture stored for it.

    A failing rollback is logged only; the caller still raises the error
    for the insert, and the picture is removed either way.
    """
    logger.error("event_insert_failed", error=str(error), error_type=type(error).__name__)
    try:
        await db.rollback()
        record_db_operation("rollback")
    except SQLAlchemyError as e:
        logger.error("event_rollback_failed", error=str(e))
    finally:
        await media_service.discard_image(picture, settings.UPLOAD_DIR)


def _is_title_conflict(error: IntegrityError) -> bool:
    detail = str(error.orig).lower()
    return "uq_events_title" in detail or "events.title" in detail


async def list_events(db: AsyncSession) -> list[dict]:
    """
    All events with the lowest price among their seat categories, newest first.
    LEFT JOIN keeps events without categories (lowest_price is None).
    No pagination: this reads the whole table.
    """
    lowest_price = func.min(SeatCategory.price).label("lowest_price")
    query = (
        select(
            Event.event_id,
            Event.title,
            Event.picture,
            Event.description,
            Event.location,
            Event.created_at,
            lowest_price,
        )
        .outerjoin(SeatCategory, SeatCategory.event_id == Event.event_id)
        .group_by(
            Event.event_id,
            Event.title,
            Event.picture,
            Event.description,
            Event.location,
            Event.created_at,
        )
        .order_by(Event.created_at.desc(), Event.event_id.desc())
    )
    try:
        result = await db.execute(query)
    except SQLAlchemyError as e:
        logger.error("events_list_failed", error=str(e))
        raise DatabaseError("Failed to fetch events")
    record_db_operation("read")
    return [dict(row) for row in result.mappings().all()]
