"""
Route and station catalog endpoints.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shuttle.api.deps import require
from shuttle.catalog.partitions import partition_routes
from shuttle.core.context import SessionContext
from shuttle.core.exceptions import PersistenceFailure
from shuttle.db.session import get_db
from shuttle.schemas.route import (
    AvailabilityResponse, RouteDetailsUpdate, RouteListResponse, RouteOption, RouteUpsert,
)
from shuttle.schemas.station import StationOut, StationUpsert
from shuttle.services import catalog_service
from shuttle.services.allocation_service import route_availability

router = APIRouter(tags=["Catalog"])


@router.get("/routes", response_model=RouteListResponse)
async def list_routes(
    _: SessionContext = Depends(require("view_catalog")),
    db: AsyncSession = Depends(get_db),
):
    """Schedule routes merged with vehicle details, plus the booking-tab partitions."""
    routes, cached = await catalog_service.get_routes(db)
    return RouteListResponse(routes=routes, partitions=partition_routes(routes), cached=cached)


@router.get("/routes/availability", response_model=AvailabilityResponse)
async def availability(
    day: Optional[date] = Query(None, alias="date"),
    _: SessionContext = Depends(require("view_catalog")),
    db: AsyncSession = Depends(get_db),
):
    """
    Remaining seats per route. Pass `date` for that day's count; without it
    every active booking on the route counts. Not cached.
    """
    return AvailabilityResponse(date=day, routes=await route_availability(db, day))


@router.put("/routes/details", response_model=list[RouteOption])
async def save_route_details(
    updates: list[RouteDetailsUpdate],
    _: SessionContext = Depends(require("edit_vehicle")),
    db: AsyncSession = Depends(get_db),
):
    """Save license plates and driver phones."""
    if not await catalog_service.save_route_details(db, updates):
        raise PersistenceFailure("Vehicle details kept locally; storage is unavailable")
    routes, _ = await catalog_service.get_routes(db, use_cache=False)
    return routes


@router.put("/routes/{route_id}", response_model=RouteOption)
async def save_route(
    route_id: str,
    data: RouteUpsert,
    _: SessionContext = Depends(require("manage_routes")),
    db: AsyncSession = Depends(get_db),
):
    return await catalog_service.save_route(db, route_id, data)


@router.delete("/routes/{route_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_route(
    route_id: str,
    _: SessionContext = Depends(require("manage_routes")),
    db: AsyncSession = Depends(get_db),
):
    await catalog_service.delete_route(db, route_id)


@router.get("/stations", response_model=list[StationOut])
async def list_stations(
    _: SessionContext = Depends(require("view_catalog")),
    db: AsyncSession = Depends(get_db),
):
    return await catalog_service.get_stations(db)


@router.put("/stations/{station_id}", response_model=StationOut)
async def save_station(
    station_id: str,
    data: StationUpsert,
    _: SessionContext = Depends(require("manage_stations")),
    db: AsyncSession = Depends(get_db),
):
    return await catalog_service.save_station(db, station_id, data)


@router.delete("/stations/{station_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_station(
    station_id: str,
    _: SessionContext = Depends(require("manage_stations")),
    db: AsyncSession = Depends(get_db),
):
    await catalog_service.delete_station(db, station_id)
