"""
Daily views over the booking store: admin shift groups and route counts,
the driver's per-station roster, and the CSV export.

All grouping is pure and works on already-loaded bookings; only the
`build_*` helpers touch the database.
"""

import csv
import io
from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from shuttle.core.clock import day_of, to_local
from shuttle.models.booking import BookingStatus
from shuttle.schemas.booking import BookingResponse
from shuttle.schemas.checkin import RosterResponse
from shuttle.schemas.report import DailyReport, RouteCount
from shuttle.schemas.route import RouteOption
from shuttle.services import booking_store, catalog_service

SHIFTS = ("morning", "evening", "night")

CSV_HEADERS = {
    "th": ["ID", "ชื่อผู้โดยสาร", "สาย", "จุดจอด", "สถานะ", "เวลา"],
    "en": ["ID", "Name", "Route", "Station", "Status", "Timestamp"],
}

STATUS_LABELS = {
    "th": {
        BookingStatus.COMPLETED.value: "ขึ้นรถแล้ว",
        BookingStatus.CANCELLED.value: "ยกเลิก",
        BookingStatus.NOSHOW.value: "ไม่มา",
    },
    "en": {
        BookingStatus.COMPLETED.value: "Checked in",
        BookingStatus.CANCELLED.value: "Cancelled",
        BookingStatus.NOSHOW.value: "No show",
    },
}
_WAITING_LABEL = {"th": "รอขึ้นรถ", "en": "Waiting"}

BOM = "\ufeff"


def filter_by_day(bookings: Iterable[BookingResponse], day: date) -> list[BookingResponse]:
    """Bookings travelling on `day` (calendar day in the service time zone)."""
    return [b for b in bookings if day_of(b.timestamp) == day]


def search(bookings: Iterable[BookingResponse], term: Optional[str]) -> list[BookingResponse]:
    if not term:
        return list(bookings)
    needle = term.strip().lower()
    return [b for b in bookings if needle in b.user_name.lower() or needle.upper() in b.id]


def group_by_shift(
    bookings: Iterable[BookingResponse],
    routes: Iterable[RouteOption],
) -> dict[str, list[BookingResponse]]:
    shift_of = {r.id: r.shift for r in routes}
    groups: dict[str, list[BookingResponse]] = {shift: [] for shift in SHIFTS}
    for booking in bookings:
        shift = shift_of.get(booking.route_id)
        if shift in groups:
            groups[shift].append(booking)
    return groups


def group_by_station(bookings: Iterable[BookingResponse]) -> dict[str, list[BookingResponse]]:
    groups: dict[str, list[BookingResponse]] = defaultdict(list)
    for booking in bookings:
        groups[booking.station_name].append(booking)
    return dict(groups)


def route_counts(bookings: Iterable[BookingResponse], routes: Iterable[RouteOption]) -> list[RouteCount]:
    """Non-cancelled bookings per route, routes without bookings left out."""
    counts: dict[str, int] = defaultdict(int)
    for booking in bookings:
        if booking.status != BookingStatus.CANCELLED.value:
            counts[booking.route_id] += 1
    return [
        RouteCount(route_id=r.id, name=r.name, count=counts[r.id])
        for r in routes
        if counts.get(r.id, 0) > 0
    ]


def status_label(status: str, language: str) -> str:
    labels = STATUS_LABELS.get(language, STATUS_LABELS["en"])
    return labels.get(status, _WAITING_LABEL.get(language, "Waiting"))


def format_timestamp(ms: int, language: str) -> str:
    local = to_local(ms)
    if language == "th":
        # Thai locale shows the Buddhist-era year
        return f"{local.day}/{local.month}/{local.year + 543} {local:%H:%M:%S}"
    return local.strftime("%m/%d/%Y, %I:%M:%S %p")


def export_csv(bookings: Iterable[BookingResponse], language: str) -> str:
    """Comma-separated export with a UTF-8 BOM so spreadsheets pick the encoding."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS.get(language, CSV_HEADERS["en"]))
    for b in bookings:
        writer.writerow([
            b.id,
            b.user_name,
            b.route_name,
            b.station_name,
            status_label(b.status, language),
            format_timestamp(b.timestamp, language),
        ])
    return BOM + buffer.getvalue()


def export_filename(day: date) -> str:
    return f"shuttle_data_{day.day:02d}-{day.month:02d}-{day.year + 543}.csv"


async def _day_bookings(db: AsyncSession, day: date, route_id: Optional[str] = None) -> list[BookingResponse]:
    rows = await booking_store.get_bookings_for_day(db, day, route_id=route_id)
    return filter_by_day((BookingResponse.model_validate(b) for b in rows), day)


async def build_daily_report(db: AsyncSession, day: date, term: Optional[str] = None) -> DailyReport:
    routes, _ = await catalog_service.get_routes(db)
    bookings = await _day_bookings(db, day)
    visible = search(bookings, term)
    return DailyReport(
        date=day,
        total=len(visible),
        shifts=group_by_shift(visible, routes),
        route_counts=route_counts(bookings, routes),
    )


async def build_roster(db: AsyncSession, route_id: str, day: date) -> RosterResponse:
    await catalog_service.get_route(db, route_id)
    bookings = [
        b for b in await _day_bookings(db, day, route_id=route_id)
        if b.status != BookingStatus.CANCELLED.value
    ]
    return RosterResponse(
        route_id=route_id,
        date=day,
        total=len(bookings),
        checked_in=sum(1 for b in bookings if b.status == BookingStatus.COMPLETED.value),
        stations=group_by_station(bookings),
    )


async def build_export(db: AsyncSession, day: date, language: str) -> str:
    return export_csv(await _day_bookings(db, day), language)
