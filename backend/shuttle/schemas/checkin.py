import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

from shuttle.schemas.booking import BookingResponse

ScanResultKind = Literal["checked_in", "already_terminal", "not_found"]


class ScanRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    # Driver view: restrict the lookup to one route on one day
    route_id: Optional[str] = None
    date: Optional[datetime.date] = None


class ScanResult(BaseModel):
    result: ScanResultKind
    message: str
    status: Optional[str] = None
    booking: Optional[BookingResponse] = None


class RosterResponse(BaseModel):
    route_id: str
    date: datetime.date
    total: int
    checked_in: int
    stations: dict[str, list[BookingResponse]]
