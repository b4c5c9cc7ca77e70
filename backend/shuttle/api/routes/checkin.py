"""
QR check-in and the driver's roster.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shuttle.api.deps import require
from shuttle.core.clock import today
from shuttle.core.context import SessionContext
from shuttle.db.session import get_db
from shuttle.schemas.checkin import RosterResponse, ScanRequest, ScanResult
from shuttle.services.lifecycle_service import check_in
from shuttle.services.reporting_service import build_roster

router = APIRouter(prefix="/checkin", tags=["Check-in"])


@router.post("/scan", response_model=ScanResult)
async def scan(
    request: ScanRequest,
    ctx: SessionContext = Depends(require("check_in")),
    db: AsyncSession = Depends(get_db),
):
    """
    Check a passenger in from a scanned QR payload.

    An unknown code or a booking that is already finished is reported in
    `result`, not as an error. Scanning the same code twice leaves the first
    check-in time untouched. Drivers must send `route_id` (422 otherwise);
    admins may omit it to search every booking.
    """
    return await check_in(db, ctx, request.code, route_id=request.route_id, day=request.date)


@router.get("/roster/{route_id}", response_model=RosterResponse)
async def roster(
    route_id: str,
    day: Optional[date] = Query(None, alias="date"),
    _: SessionContext = Depends(require("view_roster")),
    db: AsyncSession = Depends(get_db),
):
    """Passengers on one route for a day, grouped by station."""
    return await build_roster(db, route_id, day or today())
