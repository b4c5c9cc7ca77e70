"""
Best-effort admission: the legacy contract.
"""

from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from shuttle.schemas.route import RouteOption
from shuttle.services.interfaces.admission import SeatAdmission


class BestEffortAdmission(SeatAdmission):
    """
    Always admit. The availability view marks a route full once its active
    count reaches max_seats, and that flag is the only gate; two riders
    racing for the last seat can both get it.
    """

    name = "best_effort"

    async def admit(self, db: AsyncSession, route: RouteOption, day: date) -> bool:
        return True
