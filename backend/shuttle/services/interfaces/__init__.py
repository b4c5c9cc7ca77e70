"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .admission import SeatAdmission
from .best_effort_admission import BestEffortAdmission

__all__ = ['SeatAdmission', 'BestEffortAdmission']
