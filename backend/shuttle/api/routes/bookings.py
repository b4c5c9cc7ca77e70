"""
Booking endpoints: multi-date booking, the rider's history, QR tickets and
status changes.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from shuttle.api.deps import get_session, require
from shuttle.core.context import SessionContext
from shuttle.core.exceptions import NotFound, PersistenceFailure
from shuttle.db.session import get_db
from shuttle.models.booking import BookingStatus
from shuttle.schemas.booking import (
    BatchBookingResponse, BookingCancelResponse, BookingCreate, BookingResponse, StatusUpdate,
)
from shuttle.services import booking_store
from shuttle.services.allocation_service import book_dates
from shuttle.services.lifecycle_service import cancel_booking, set_status
from shuttle.services.ticket_service import render_qr_png

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("", response_model=BatchBookingResponse, status_code=status.HTTP_201_CREATED)
async def create_bookings(
    booking_data: BookingCreate,
    ctx: SessionContext = Depends(require("book")),
    db: AsyncSession = Depends(get_db),
):
    """
    Book one route and station for several dates.

    Each date is decided on its own: dates the rider already travels on are
    listed under `duplicates`, dates that could not be stored under `failed`.
    Bookings made before a failing date are kept.
    """
    result = await book_dates(
        db,
        ctx.user,
        booking_data.route_id,
        booking_data.station_id,
        booking_data.dates,
        direction=booking_data.direction,
    )
    if result.failed and not (result.created or result.duplicates or result.full):
        raise PersistenceFailure("Bookings could not be saved, please try again")

    return BatchBookingResponse(
        created=result.created,
        created_count=result.created_count,
        duplicates=result.duplicates,
        failed=result.failed,
        full=result.full,
    )


@router.get("/me", response_model=list[BookingResponse])
async def my_bookings(
    ctx: SessionContext = Depends(require("view_own")),
    db: AsyncSession = Depends(get_db),
):
    """The rider's bookings, newest travel date first."""
    return await booking_store.get_user_bookings(db, ctx.user.id)


@router.get("/me/active", response_model=BookingResponse)
async def my_active_booking(
    ctx: SessionContext = Depends(require("view_own")),
    db: AsyncSession = Depends(get_db),
):
    booking = await booking_store.get_user_active_booking(db, ctx.user.id)
    if booking is None:
        raise NotFound("No active booking")
    return booking


@router.get("/{booking_id}/qr", response_class=Response)
async def booking_qr(
    booking_id: str,
    ctx: SessionContext = Depends(get_session),
    db: AsyncSession = Depends(get_db),
):
    """QR ticket encoding the booking id, as PNG."""
    booking = await booking_store.get_booking(db, booking_id.upper())
    if booking is None or (booking.user_id != ctx.user.id and not ctx.is_staff):
        raise NotFound(f"Booking {booking_id} not found", booking_id=booking_id)
    return Response(content=render_qr_png(booking.id), media_type="image/png")


@router.post("/{booking_id}/cancel", response_model=BookingCancelResponse)
async def cancel_booking_endpoint(
    booking_id: str,
    ctx: SessionContext = Depends(require("cancel_own")),
    db: AsyncSession = Depends(get_db),
):
    booking = await cancel_booking(db, ctx, booking_id.upper())
    return BookingCancelResponse(
        message="Booking cancelled",
        booking_id=booking.id,
        status=booking.status,
    )


@router.patch("/{booking_id}/status", response_model=BookingResponse)
async def mark_booking(
    booking_id: str,
    update: StatusUpdate,
    ctx: SessionContext = Depends(require("view_roster")),
    db: AsyncSession = Depends(get_db),
):
    """Roster action: mark a passenger checked in or no-show."""
    return await set_status(db, ctx, booking_id.upper(), BookingStatus(update.status))
