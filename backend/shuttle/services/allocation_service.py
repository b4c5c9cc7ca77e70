"""
Seat allocation engine.

A rider books one route/station for one or more dates. Each date is handled
on its own:

  1. travel timestamp = date + route departure time (service time zone)
  2. skip the date if the rider already has a non-cancelled booking within
     DUPLICATE_WINDOW_MS of that timestamp, on any route
  3. ask the seat admission strategy whether the seat may be taken
  4. insert a WAITING booking and commit

Every accepted date is committed before the next one is tried, so a failure
later in the batch never takes back an earlier booking.

CONCURRENCY: the duplicate check and, under the default best_effort seat
policy, the capacity check are check-then-act. Two requests racing for the
last seat can both succeed; the availability view then shows the route as
full. SEAT_POLICY=strict closes that gap with a per-route row lock (see
admission_service).
"""

import time
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from shuttle.core.clock import combine, today, booking_window
from shuttle.core.config import get_settings
from shuttle.core.exceptions import DuplicateBooking, PersistenceFailure, RouteFull, ValidationError
from shuttle.core.logging import get_logger
from shuttle.core.metrics import booking_batch_latency, record_booking_attempt
from shuttle.models.booking import Booking, BookingStatus
from shuttle.schemas.booking import BookingResponse
from shuttle.schemas.route import RouteAvailability, RouteOption
from shuttle.schemas.station import StationOut
from shuttle.schemas.user import UserResponse
from shuttle.services import booking_store, catalog_service
from shuttle.services.interfaces.admission import SeatAdmission
from shuttle.services.strategy_factory import get_admission

logger = get_logger(__name__)


@dataclass
class BatchResult:
    created: list[BookingResponse] = field(default_factory=list)
    duplicates: list[date] = field(default_factory=list)
    failed: list[date] = field(default_factory=list)
    full: list[date] = field(default_factory=list)

    @property
    def created_count(self) -> int:
        return len(self.created)


def find_duplicate(
    bookings: Iterable[BookingResponse],
    travel_ts: int,
    window_ms: Optional[int] = None,
) -> Optional[BookingResponse]:
    """First non-cancelled booking closer than `window_ms` to `travel_ts`."""
    window_ms = get_settings().DUPLICATE_WINDOW_MS if window_ms is None else window_ms
    for booking in bookings:
        if booking.status == BookingStatus.CANCELLED.value:
            continue
        if abs(booking.timestamp - travel_ts) < window_ms:
            return booking
    return None


def remaining_seats(route: RouteOption, active: int) -> RouteAvailability:
    remaining = max(route.max_seats - active, 0)
    return RouteAvailability(
        route_id=route.id,
        max_seats=route.max_seats,
        active=active,
        remaining=remaining,
        full=active >= route.max_seats,
    )


async def attempt_booking(
    db: AsyncSession,
    user: UserResponse,
    route: RouteOption,
    station: StationOut,
    day: date,
    direction: str,
    existing: list[BookingResponse],
    admission: Optional[SeatAdmission] = None,
) -> BookingResponse:
    """
    Book one seat for one date.

    `existing` is the rider's booking history; it is checked for duplicates
    and the new booking is appended to it on success.
    """
    admission = admission or get_admission()
    travel_ts = combine(day, route.time)

    duplicate = find_duplicate(existing, travel_ts)
    if duplicate is not None:
        raise DuplicateBooking(day, existing_id=duplicate.id)

    if not await admission.admit(db, route, day):
        raise RouteFull(f"{route.name} is full on {day.isoformat()}", route_id=route.id, date=day.isoformat())

    booking = Booking(
        id=booking_store.new_booking_id(),
        user_id=user.id,
        user_name=user.name,
        route_id=route.id,
        route_name=route.name,
        station_id=station.id,
        station_name=station.name,
        timestamp=travel_ts,
        status=BookingStatus.WAITING.value,
        check_in_time=None,
        shift=route.shift,
        direction=direction,
    )
    if not await booking_store.save_booking(db, booking):
        raise PersistenceFailure("Booking could not be saved", date=day.isoformat())

    # Snapshot now: a rollback later in the batch would expire the ORM object
    created = BookingResponse.model_validate(booking)
    existing.append(created)
    return created


def _check_dates(dates: Iterable[date]) -> list[date]:
    settings = get_settings()
    window = set(booking_window(today(), settings.BOOKING_WINDOW_DAYS))
    requested = sorted(set(dates))
    outside = [d for d in requested if d not in window]
    if outside:
        raise ValidationError(
            f"Dates must be within the next {settings.BOOKING_WINDOW_DAYS} days",
            dates=[d.isoformat() for d in outside],
        )
    return requested


async def book_dates(
    db: AsyncSession,
    user: UserResponse,
    route_id: str,
    station_id: str,
    dates: Iterable[date],
    direction: Optional[str] = None,
) -> BatchResult:
    """Book a route/station for several dates, each date independently."""
    route = await catalog_service.get_route(db, route_id)
    station = await catalog_service.get_station(db, station_id)
    requested = _check_dates(dates)
    direction = direction or route.direction
    admission = get_admission()

    started = time.perf_counter()
    existing = [
        BookingResponse.model_validate(b)
        for b in await booking_store.get_user_bookings(db, user.id)
    ]

    result = BatchResult()
    for day in requested:
        try:
            booking = await attempt_booking(db, user, route, station, day, direction, existing, admission)
        except DuplicateBooking as e:
            result.duplicates.append(day)
            record_booking_attempt("duplicate")
            logger.info("booking_duplicate_skipped", user_id=user.id, route_id=route.id,
                        day=day.isoformat(), existing_id=e.detail.get("existing_id"))
        except RouteFull:
            result.full.append(day)
            record_booking_attempt("full")
        except PersistenceFailure:
            result.failed.append(day)
            record_booking_attempt("failed")
        else:
            result.created.append(booking)
            record_booking_attempt("created")
            logger.info("booking_created", booking_id=booking.id, user_id=user.id,
                        route_id=route.id, station_id=station.id, day=day.isoformat())

    booking_batch_latency.observe(time.perf_counter() - started)
    logger.info(
        "booking_batch_done",
        user_id=user.id,
        route_id=route.id,
        created=result.created_count,
        duplicates=len(result.duplicates),
        failed=len(result.failed),
        full=len(result.full),
        policy=admission.name,
    )
    return result


async def route_availability(db: AsyncSession, day: Optional[date] = None) -> list[RouteAvailability]:
    """
    Remaining seats per route. With `day`, counts that day only; without it,
    counts every active booking on the route (the legacy badge).
    """
    routes, _ = await catalog_service.get_routes(db)
    counts = await booking_store.get_active_counts(db, day=day)
    return [remaining_seats(route, counts.get(route.id, 0)) for route in routes]
