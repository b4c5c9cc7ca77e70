"""
Seat admission strategy factory.
Selected by the SEAT_POLICY setting.
"""

from typing import Optional

from shuttle.core.config import get_settings
from shuttle.services.interfaces.admission import SeatAdmission
from shuttle.services.interfaces.best_effort_admission import BestEffortAdmission
from shuttle.services.admission_service import StrictAdmission


def get_admission_strategy(policy: Optional[str] = None) -> SeatAdmission:
    """
    - best_effort (default): legacy behaviour, capacity is advisory
    - strict: route row lock, hard cap at max_seats
    """
    policy = policy or get_settings().SEAT_POLICY

    if policy == "strict":
        return StrictAdmission()
    return BestEffortAdmission()


_strategy: Optional[SeatAdmission] = None


def get_admission() -> SeatAdmission:
    """Get admission strategy singleton."""
    global _strategy
    if _strategy is None:
        _strategy = get_admission_strategy()
    return _strategy
