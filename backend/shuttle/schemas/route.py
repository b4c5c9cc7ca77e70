"""
Pydantic schemas for the route catalog.
"""

import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

Shift = Literal["morning", "evening", "night"]
Direction = Literal["inbound", "outbound"]


class RouteOption(BaseModel):
    id: str = Field(..., min_length=1, max_length=32)
    name: str = Field(..., min_length=1, max_length=255)
    time: str = Field(..., pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    shift: Shift
    direction: Direction
    overtime: bool = False
    max_seats: int = Field(40, gt=0, le=1000)
    description: Optional[str] = Field(None, max_length=1000)
    license_plate: Optional[str] = None
    driver_phone: Optional[str] = None

    model_config = {"from_attributes": True}


class RouteUpsert(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    time: str = Field(..., pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    shift: Shift
    direction: Direction
    overtime: bool = False
    max_seats: int = Field(40, gt=0, le=1000)
    description: Optional[str] = Field(None, max_length=1000)


class RouteDetailsUpdate(BaseModel):
    route_id: str
    license_plate: Optional[str] = Field(None, max_length=32)
    driver_phone: Optional[str] = Field(None, max_length=32)


class RoutePartitions(BaseModel):
    morning_inbound: list[RouteOption] = []
    evening_outbound: list[RouteOption] = []
    night_inbound: list[RouteOption] = []
    night_outbound: list[RouteOption] = []


class RouteListResponse(BaseModel):
    routes: list[RouteOption]
    partitions: RoutePartitions
    cached: bool = False


class RouteAvailability(BaseModel):
    route_id: str
    max_seats: int
    active: int
    remaining: int
    full: bool


class AvailabilityResponse(BaseModel):
    date: Optional[datetime.date]
    routes: list[RouteAvailability]
