"""
Booking store: the data-access contract the engines are written against.

Every function here is a single round trip with its own commit. Failures of
the database are caught, logged and degraded to a safe default (empty list,
None, 0 or False) instead of propagating; callers that need to tell a
failure apart check the boolean result.
"""

import secrets
import string
from datetime import date
from typing import Iterable, Optional

from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shuttle.core.clock import day_bounds, now_ms
from shuttle.core.logging import get_logger
from shuttle.core.metrics import record_store_failure
from shuttle.models.booking import Booking, BookingStatus, ACTIVE_STATUSES

logger = get_logger(__name__)

ID_ALPHABET = string.ascii_uppercase + string.digits
ID_LENGTH = 9
MAX_ID_ATTEMPTS = 3

_ACTIVE = [s.value for s in ACTIVE_STATUSES]


def new_booking_id() -> str:
    """Short base-36 token, also printed as the QR payload."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))


async def _read_failed(db: AsyncSession, operation: str, error: Exception) -> None:
    logger.error("store_read_failed", operation=operation, error=str(error))
    record_store_failure(operation)
    await db.rollback()


async def get_bookings(db: AsyncSession) -> list[Booking]:
    try:
        result = await db.execute(select(Booking).order_by(Booking.timestamp.desc()))
        return list(result.scalars().all())
    except SQLAlchemyError as e:
        await _read_failed(db, "get_bookings", e)
        return []


async def get_user_bookings(db: AsyncSession, user_id: str) -> list[Booking]:
    try:
        result = await db.execute(
            select(Booking)
            .where(Booking.user_id == user_id)
            .order_by(Booking.timestamp.desc())
        )
        return list(result.scalars().all())
    except SQLAlchemyError as e:
        await _read_failed(db, "get_user_bookings", e)
        return []


async def get_bookings_for_day(
    db: AsyncSession,
    day: date,
    route_id: Optional[str] = None,
) -> list[Booking]:
    start, end = day_bounds(day)
    query = select(Booking).where(Booking.timestamp >= start, Booking.timestamp < end)
    if route_id is not None:
        query = query.where(Booking.route_id == route_id)
    try:
        result = await db.execute(query.order_by(Booking.timestamp.asc(), Booking.station_name.asc()))
        return list(result.scalars().all())
    except SQLAlchemyError as e:
        await _read_failed(db, "get_bookings_for_day", e)
        return []


async def get_booking(db: AsyncSession, booking_id: str) -> Optional[Booking]:
    try:
        return await db.get(Booking, booking_id, populate_existing=True)
    except SQLAlchemyError as e:
        await _read_failed(db, "get_booking", e)
        return None


async def get_user_active_booking(db: AsyncSession, user_id: str) -> Optional[Booking]:
    """Earliest upcoming-or-current active booking of a user."""
    try:
        result = await db.execute(
            select(Booking)
            .where(Booking.user_id == user_id, Booking.status.in_(_ACTIVE))
            .order_by(Booking.timestamp.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()
    except SQLAlchemyError as e:
        await _read_failed(db, "get_user_active_booking", e)
        return None


async def get_route_seat_count(db: AsyncSession, route_id: str, day: Optional[date] = None) -> int:
    """
    Active (BOOKED/WAITING) bookings on a route. Without `day` the count spans
    all dates, which is what the legacy availability badge shows.
    """
    counts = await get_active_counts(db, day=day, route_ids=[route_id])
    return counts.get(route_id, 0)


async def get_active_counts(
    db: AsyncSession,
    day: Optional[date] = None,
    route_ids: Optional[Iterable[str]] = None,
) -> dict[str, int]:
    query = (
        select(Booking.route_id, func.count(Booking.id))
        .where(Booking.status.in_(_ACTIVE))
        .group_by(Booking.route_id)
    )
    if day is not None:
        start, end = day_bounds(day)
        query = query.where(Booking.timestamp >= start, Booking.timestamp < end)
    if route_ids is not None:
        query = query.where(Booking.route_id.in_(list(route_ids)))
    try:
        result = await db.execute(query)
        return {route_id: count for route_id, count in result.all()}
    except SQLAlchemyError as e:
        await _read_failed(db, "get_active_counts", e)
        return {}


async def save_booking(db: AsyncSession, booking: Booking) -> bool:
    """
    Insert a booking. A primary-key collision on the random id gets a fresh
    id and another try; anything else is reported as False.
    """
    for attempt in range(1, MAX_ID_ATTEMPTS + 1):
        if not booking.id:
            booking.id = new_booking_id()
        db.add(booking)
        try:
            await db.commit()
            return True
        except IntegrityError:
            await db.rollback()
            logger.info("booking_id_collision", booking_id=booking.id, attempt=attempt)
            booking.id = None
        except SQLAlchemyError as e:
            logger.error("store_write_failed", operation="save_booking", error=str(e))
            record_store_failure("save_booking")
            await db.rollback()
            return False

    logger.error("booking_id_exhausted", attempts=MAX_ID_ATTEMPTS)
    return False


async def update_booking_status(
    db: AsyncSession,
    booking_id: str,
    status: BookingStatus,
    allowed_from: Iterable[BookingStatus] = ACTIVE_STATUSES,
) -> bool:
    """
    Move a booking to `status` if its current status is one of `allowed_from`.

    The guard is part of the UPDATE itself, so two staff scanning the same
    code cannot both win. Check-in time is stamped on COMPLETED and never
    overwritten once set. Returns True when a row changed.
    """
    values = {"status": status.value}
    if status == BookingStatus.COMPLETED:
        values["check_in_time"] = func.coalesce(Booking.check_in_time, now_ms())

    try:
        result = await db.execute(
            update(Booking)
            .where(
                Booking.id == booking_id,
                Booking.status.in_([s.value for s in allowed_from]),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("store_write_failed", operation="update_booking_status", booking_id=booking_id, error=str(e))
        record_store_failure("update_booking_status")
        await db.rollback()
        return False

    return result.rowcount > 0
