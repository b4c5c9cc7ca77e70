"""
Tests for daily reports, the driver roster helpers and CSV export.
"""

from datetime import date, timedelta

import pytest
from httpx import AsyncClient

from shuttle.catalog.defaults import ROUTES_DATA
from shuttle.core.clock import combine, today
from shuttle.models.booking import BookingStatus
from shuttle.schemas.booking import BookingResponse
from shuttle.services.reporting_service import (
    BOM,
    export_csv,
    export_filename,
    filter_by_day,
    format_timestamp,
    group_by_shift,
    group_by_station,
    route_counts,
    search,
    status_label,
)

DAY = date(2024, 1, 5)


def _booking(id, route_id="m1", user_name="Somchai", station_name="Gate", ts=None, status="WAITING"):
    return BookingResponse(
        id=id,
        user_id="u-" + user_name,
        user_name=user_name,
        route_id=route_id,
        route_name=f"Route {route_id}",
        station_id="s1",
        station_name=station_name,
        timestamp=ts if ts is not None else combine(DAY, "06:30"),
        status=status,
    )


def test_filter_by_day_uses_service_time_zone():
    inside = _booking("A00000001", ts=combine(DAY, "23:59"))
    early = _booking("A00000002", ts=combine(DAY, "00:00"))
    next_day = _booking("A00000003", ts=combine(DAY + timedelta(days=1), "00:00"))
    assert [b.id for b in filter_by_day([inside, early, next_day], DAY)] == ["A00000001", "A00000002"]


def test_search_by_name_or_id():
    bookings = [_booking("ABC123XYZ", user_name="Somchai"), _booking("QWE987RTY", user_name="Malee")]
    assert [b.id for b in search(bookings, "mal")] == ["QWE987RTY"]
    assert [b.id for b in search(bookings, "abc1")] == ["ABC123XYZ"]
    assert len(search(bookings, "")) == 2
    assert search(bookings, "nobody") == []


def test_group_by_shift():
    bookings = [_booking("A1", route_id="m1"), _booking("A2", route_id="n2"), _booking("A3", route_id="mo3")]
    groups = group_by_shift(bookings, ROUTES_DATA)
    assert [b.id for b in groups["morning"]] == ["A1"]
    assert [b.id for b in groups["evening"]] == ["A3"]
    assert [b.id for b in groups["night"]] == ["A2"]


def test_group_by_station():
    groups = group_by_station([
        _booking("A1", station_name="Gate"),
        _booking("A2", station_name="Market"),
        _booking("A3", station_name="Gate"),
    ])
    assert {name: [b.id for b in members] for name, members in groups.items()} == {
        "Gate": ["A1", "A3"],
        "Market": ["A2"],
    }


def test_route_counts_skip_cancelled_and_empty_routes():
    counts = route_counts([
        _booking("A1", route_id="m1"),
        _booking("A2", route_id="m1", status="COMPLETED"),
        _booking("A3", route_id="m2", status="CANCELLED"),
    ], ROUTES_DATA)
    assert [(c.route_id, c.count) for c in counts] == [("m1", 2)]


def test_status_labels():
    assert status_label("COMPLETED", "th") == "ขึ้นรถแล้ว"
    assert status_label("WAITING", "en") == "Waiting"
    assert status_label("BOOKED", "th") == "รอขึ้นรถ"
    assert status_label("NOSHOW", "en") == "No show"


def test_format_timestamp():
    ms = combine(DAY, "07:05") + 9_000
    assert format_timestamp(ms, "th") == "5/1/2567 07:05:09"
    assert format_timestamp(ms, "en") == "01/05/2024, 07:05:09 AM"


def test_export_csv():
    content = export_csv([_booking("A00000001", user_name="Somchai, Jr.")], "en")
    assert content.startswith(BOM)
    lines = content[len(BOM):].splitlines()
    assert lines[0] == "ID,Name,Route,Station,Status,Timestamp"
    assert lines[1] == 'A00000001,"Somchai, Jr.",Route m1,Gate,Waiting,"01/05/2024, 06:30:00 AM"'


def test_export_csv_thai_headers():
    content = export_csv([], "th")
    assert content == BOM + "ID,ชื่อผู้โดยสาร,สาย,จุดจอด,สถานะ,เวลา\n"


def test_export_filename_uses_buddhist_year():
    assert export_filename(DAY) == "shuttle_data_05-01-2567.csv"


@pytest.mark.asyncio
async def test_daily_report(client: AsyncClient, catalog, rider, other_rider, admin_headers, make_booking):
    await make_booking(rider, route_id="m1")
    await make_booking(other_rider, route_id="n1", time="18:30", status=BookingStatus.CANCELLED)
    await make_booking(other_rider, route_id="mn2", time="17:30")
    await make_booking(rider, route_id="m1", day=today() + timedelta(days=1))

    response = await client.get(f"/api/v1/reports/daily?date={today().isoformat()}", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    assert len(data["shifts"]["morning"]) == 1
    assert len(data["shifts"]["evening"]) == 1
    assert len(data["shifts"]["night"]) == 1
    assert {c["route_id"]: c["count"] for c in data["route_counts"]} == {"m1": 1, "mn2": 1}


@pytest.mark.asyncio
async def test_daily_report_search(client: AsyncClient, catalog, rider, other_rider, admin_headers, make_booking):
    await make_booking(rider)
    await make_booking(other_rider, time="07:00")

    response = await client.get("/api/v1/reports/daily?q=malee", headers=admin_headers)
    data = response.json()
    assert data["total"] == 1
    assert data["shifts"]["morning"][0]["user_name"] == "Malee Srisuk"


@pytest.mark.asyncio
async def test_driver_cannot_read_reports(client: AsyncClient, driver_headers):
    response = await client.get("/api/v1/reports/daily", headers=driver_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_export_download(client: AsyncClient, catalog, rider, admin_headers, make_booking):
    await make_booking(rider)

    response = await client.get(f"/api/v1/reports/export?lang=en&date={today().isoformat()}", headers=admin_headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert export_filename(today()) in response.headers["content-disposition"]
    assert response.content.startswith(BOM.encode("utf-8"))
    rows = response.content.decode("utf-8-sig").splitlines()
    assert rows[0].startswith("ID,Name")
    assert len(rows) == 2
