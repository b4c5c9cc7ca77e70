"""
Domain error taxonomy.

Each error is an HTTPException so services can raise it directly and FastAPI
turns it into a response. `AlreadyTerminal` is deliberately absent: a re-scan
of a finished booking is reported as a check-in result, not raised.
"""

from datetime import date
from typing import Optional

from fastapi import HTTPException, status


class ShuttleError(HTTPException):
    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "shuttle_error"

    def __init__(self, detail: str, **extra):
        payload = {"code": self.code, "message": detail, **extra}
        super().__init__(status_code=self.status_code, detail=payload)
        self.message = detail


class ValidationError(ShuttleError):
    status_code = status.HTTP_422_UNPROCESSABLE_CONTENT
    code = "validation_error"


class Forbidden(ShuttleError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"


class NotFound(ShuttleError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class DuplicateBooking(ShuttleError):
    status_code = status.HTTP_409_CONFLICT
    code = "duplicate_booking"

    def __init__(self, travel_date: date, existing_id: Optional[str] = None):
        super().__init__(
            f"Already booked a trip at this time on {travel_date.isoformat()}",
            date=travel_date.isoformat(),
            existing_id=existing_id,
        )
        self.travel_date = travel_date


class RouteFull(ShuttleError):
    status_code = status.HTTP_409_CONFLICT
    code = "route_full"


class InvalidTransition(ShuttleError):
    status_code = status.HTTP_409_CONFLICT
    code = "invalid_transition"


class PersistenceFailure(ShuttleError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "persistence_failure"


class CameraUnavailable(RuntimeError):
    """Camera could not be opened, usually a permissions problem."""


class AlreadyRegistered(ShuttleError):
    status_code = status.HTTP_409_CONFLICT
    code = "already_registered"


class NotAuthenticated(ShuttleError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "not_authenticated"
