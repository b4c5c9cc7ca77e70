"""
Admin reports: daily overview and CSV export.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from shuttle.api.deps import require
from shuttle.core.clock import today
from shuttle.core.context import SessionContext
from shuttle.db.session import get_db
from shuttle.schemas.report import DailyReport
from shuttle.services.reporting_service import build_daily_report, build_export, export_filename

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/daily", response_model=DailyReport)
async def daily_report(
    day: Optional[date] = Query(None, alias="date"),
    q: Optional[str] = Query(None, max_length=100, description="Passenger name or booking id"),
    _: SessionContext = Depends(require("report")),
    db: AsyncSession = Depends(get_db),
):
    return await build_daily_report(db, day or today(), q)


@router.get("/export", response_class=Response)
async def export_day(
    day: Optional[date] = Query(None, alias="date"),
    ctx: SessionContext = Depends(require("export")),
    db: AsyncSession = Depends(get_db),
):
    """The day's bookings as CSV, headers in the caller's language."""
    day = day or today()
    content = await build_export(db, day, ctx.language)
    return Response(
        content=content.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(day)}"'},
    )
