"""
Booking lifecycle and QR check-in.

    WAITING/BOOKED --rider cancels-->   CANCELLED
    WAITING/BOOKED --scan / check-in--> COMPLETED
    WAITING        --mark no-show-->    NOSHOW

COMPLETED, CANCELLED and NOSHOW are terminal. Each transition is written as
a conditional UPDATE guarded on the allowed source states (see
booking_store.update_booking_status), so retries and concurrent scans are
harmless: the second writer matches no row and the booking keeps the
check-in time of the first.
"""

from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from shuttle.core.clock import today
from shuttle.core.context import SessionContext
from shuttle.core.exceptions import Forbidden, InvalidTransition, NotFound, PersistenceFailure, ValidationError
from shuttle.core.logging import get_logger
from shuttle.core.metrics import record_scan, record_transition
from shuttle.models.booking import Booking, BookingStatus, TERMINAL_STATUSES
from shuttle.schemas.booking import BookingResponse
from shuttle.schemas.checkin import ScanResult
from shuttle.services import booking_store

logger = get_logger(__name__)

TRANSITIONS: dict[BookingStatus, tuple[BookingStatus, ...]] = {
    BookingStatus.CANCELLED: (BookingStatus.WAITING, BookingStatus.BOOKED),
    BookingStatus.COMPLETED: (BookingStatus.WAITING, BookingStatus.BOOKED),
    BookingStatus.NOSHOW: (BookingStatus.WAITING,),
}

_STAFF_ACTIONS = {
    BookingStatus.COMPLETED: "check_in",
    BookingStatus.NOSHOW: "mark_no_show",
}


def is_terminal(status: str) -> bool:
    return status in (s.value for s in TERMINAL_STATUSES)


async def transition(db: AsyncSession, booking: Booking, target: BookingStatus) -> Booking:
    """
    Move `booking` to `target`.

    Re-applying the status a booking already has is a no-op. Any other move
    out of a terminal state, or one the table does not list, raises
    InvalidTransition.
    """
    if booking.status == target.value:
        return booking
    previous = booking.status

    allowed = TRANSITIONS.get(target, ())
    if booking.status not in (s.value for s in allowed):
        raise InvalidTransition(
            f"Booking {booking.id} is {booking.status}, cannot become {target.value}",
            booking_id=booking.id,
            status=booking.status,
        )

    changed = await booking_store.update_booking_status(db, booking.id, target, allowed_from=allowed)
    current = await booking_store.get_booking(db, booking.id)
    if current is None:
        raise PersistenceFailure("Booking status could not be updated", booking_id=booking.id)

    if changed:
        record_transition(target.value)
        logger.info("booking_status_changed", booking_id=booking.id, old=previous, new=target.value)
    elif current.status != target.value:
        # Lost a race, or the write failed and the row is unchanged
        if is_terminal(current.status):
            raise InvalidTransition(
                f"Booking {booking.id} is {current.status}, cannot become {target.value}",
                booking_id=booking.id,
                status=current.status,
            )
        raise PersistenceFailure("Booking status could not be updated", booking_id=booking.id)
    return current


async def _load(db: AsyncSession, booking_id: str) -> Booking:
    booking = await booking_store.get_booking(db, booking_id)
    if booking is None:
        raise NotFound(f"Booking {booking_id} not found", booking_id=booking_id)
    return booking


async def cancel_booking(db: AsyncSession, ctx: SessionContext, booking_id: str) -> Booking:
    """Rider cancels one of their own active bookings."""
    booking = await _load(db, booking_id)
    if booking.user_id != ctx.user.id:
        # Same answer as a missing booking: do not leak other riders' ids
        raise NotFound(f"Booking {booking_id} not found", booking_id=booking_id)
    return await transition(db, booking, BookingStatus.CANCELLED)


async def set_status(db: AsyncSession, ctx: SessionContext, booking_id: str, target: BookingStatus) -> Booking:
    """Staff marks a booking checked in or no-show from the roster."""
    action = _STAFF_ACTIONS.get(target)
    if action is None or not ctx.can(action):
        raise Forbidden(f"Role {ctx.role} cannot set {target.value}")
    booking = await _load(db, booking_id)
    updated = await transition(db, booking, target)
    logger.info("booking_marked", booking_id=booking_id, status=updated.status, by=ctx.user.id)
    return updated


async def check_in(
    db: AsyncSession,
    ctx: SessionContext,
    code: str,
    route_id: Optional[str] = None,
    day: Optional[date] = None,
) -> ScanResult:
    """
    Resolve a scanned QR payload and check the booking in.

    With `route_id` (the driver view) only that route's non-cancelled
    bookings on `day` (default today) are candidates. Without it (the admin
    view) every booking is; only roles with `scan_any` may leave it out.
    """
    if route_id is None and not ctx.can("scan_any"):
        raise ValidationError("Select the route being boarded before scanning", field="route_id")
    code = code.strip().upper()

    if route_id is not None:
        candidates = await booking_store.get_bookings_for_day(db, day or today(), route_id=route_id)
        booking = next(
            (b for b in candidates if b.id == code and b.status != BookingStatus.CANCELLED.value),
            None,
        )
    else:
        booking = await booking_store.get_booking(db, code)

    if booking is None:
        record_scan("not_found")
        logger.info("checkin_not_found", code=code, route_id=route_id, by=ctx.user.id)
        message = "Passenger not found for this route today" if route_id else "Unknown QR code"
        return ScanResult(result="not_found", message=message)

    if is_terminal(booking.status):
        record_scan("already_terminal")
        logger.info("checkin_already_terminal", booking_id=booking.id, status=booking.status)
        return ScanResult(
            result="already_terminal",
            message=f"Booking {booking.id[:6]} is already {booking.status}",
            status=booking.status,
            booking=BookingResponse.model_validate(booking),
        )

    try:
        updated = await transition(db, booking, BookingStatus.COMPLETED)
    except InvalidTransition as e:
        # Someone else finished it between our read and our write
        record_scan("already_terminal")
        status = e.detail.get("status")
        current = await booking_store.get_booking(db, booking.id)
        return ScanResult(
            result="already_terminal",
            message=f"Booking {booking.id[:6]} is already {status}",
            status=status,
            booking=BookingResponse.model_validate(current) if current else None,
        )

    record_scan("checked_in")
    logger.info("checkin_completed", booking_id=updated.id, route_id=updated.route_id, by=ctx.user.id)
    return ScanResult(
        result="checked_in",
        message=f"Welcome, {updated.user_name}",
        status=updated.status,
        booking=BookingResponse.model_validate(updated),
    )
