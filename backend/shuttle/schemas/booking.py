"""
Pydantic schemas for booking-related request/response validation.
"""

from datetime import date
from typing import Literal, Optional
from pydantic import BaseModel, Field

from shuttle.schemas.route import Direction

BookingStatusName = Literal["BOOKED", "WAITING", "COMPLETED", "CANCELLED", "NOSHOW"]


class BookingCreate(BaseModel):
    route_id: str
    station_id: str
    dates: list[date] = Field(..., min_length=1, max_length=14)
    # Defaults to the route's own direction
    direction: Optional[Direction] = None


class BookingResponse(BaseModel):
    id: str
    user_id: str
    user_name: str
    route_id: str
    route_name: str
    station_id: str
    station_name: str
    timestamp: int
    status: BookingStatusName
    check_in_time: Optional[int] = None
    shift: Optional[str] = None
    direction: Optional[str] = None

    model_config = {"from_attributes": True}


class BatchBookingResponse(BaseModel):
    created: list[BookingResponse]
    created_count: int
    duplicates: list[date]
    failed: list[date]
    full: list[date] = []


class StatusUpdate(BaseModel):
    status: Literal["COMPLETED", "NOSHOW"]


class BookingCancelResponse(BaseModel):
    message: str
    booking_id: str
    status: str
