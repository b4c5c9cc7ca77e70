"""
Strict seat admission.

Serializes bookings per route with a row lock:

  1. SELECT ... FROM routes WHERE id = :route_id FOR UPDATE
  2. count active bookings on that route for the travel day
  3. admit only if count < max_seats; the caller inserts and commits,
     which releases the lock

Concurrent bookings for the same route queue on the lock, so the count a
request sees already includes every booking committed before it. Different
routes never contend. SQLite ignores FOR UPDATE; there the single writer
lock gives the same effect.
"""

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shuttle.core.logging import get_logger
from shuttle.models.route import Route
from shuttle.schemas.route import RouteOption
from shuttle.services import booking_store
from shuttle.services.interfaces.admission import SeatAdmission

logger = get_logger(__name__)


class StrictAdmission(SeatAdmission):

    name = "strict"

    async def admit(self, db: AsyncSession, route: RouteOption, day: date) -> bool:
        await db.execute(select(Route.id).where(Route.id == route.id).with_for_update())
        taken = await booking_store.get_route_seat_count(db, route.id, day=day)
        if taken >= route.max_seats:
            logger.warning(
                "booking_rejected_full",
                route_id=route.id,
                day=day.isoformat(),
                taken=taken,
                max_seats=route.max_seats,
            )
            return False
        return True
