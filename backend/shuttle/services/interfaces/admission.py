"""
Seat admission strategy interface.
Decides, at booking time, whether one more seat may be taken on a route/day.
"""

from abc import ABC, abstractmethod
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from shuttle.schemas.route import RouteOption


class SeatAdmission(ABC):
    """
    Implementations:
    - BestEffortAdmission: never rejects; capacity is shown, not enforced
    - StrictAdmission: locks the route row and rejects at max_seats
    """

    name: str = "abstract"

    @abstractmethod
    async def admit(self, db: AsyncSession, route: RouteOption, day: date) -> bool:
        """
        Return True if a new booking on `route` for `day` may be written.

        Called inside the same transaction as the insert that follows.
        """
