import datetime
from pydantic import BaseModel

from shuttle.schemas.booking import BookingResponse


class RouteCount(BaseModel):
    route_id: str
    name: str
    count: int


class DailyReport(BaseModel):
    date: datetime.date
    total: int
    shifts: dict[str, list[BookingResponse]]
    route_counts: list[RouteCount]
