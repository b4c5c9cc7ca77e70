"""
Tests for the booking lifecycle: QR check-in, no-shows, cancellation and
the driver roster.
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from shuttle.core.clock import today
from shuttle.core.context import SessionContext
from shuttle.models.booking import BookingStatus
from shuttle.schemas.user import UserResponse
from shuttle.services import booking_store
from shuttle.services.lifecycle_service import transition


@pytest.mark.asyncio
async def test_driver_checks_in_passenger(client: AsyncClient, rider, driver_headers, make_booking):
    booking = await make_booking(rider, route_id="m1")

    response = await client.post(
        "/api/v1/checkin/scan",
        json={"code": booking.id, "route_id": "m1"},
        headers=driver_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["result"] == "checked_in"
    assert data["message"] == "Welcome, Somchai Jaidee"
    assert data["booking"]["status"] == "COMPLETED"
    assert data["booking"]["check_in_time"] is not None


@pytest.mark.asyncio
async def test_scan_code_is_case_insensitive(client: AsyncClient, rider, admin_headers, make_booking):
    booking = await make_booking(rider)
    response = await client.post(
        "/api/v1/checkin/scan",
        json={"code": f"  {booking.id.lower()} "},
        headers=admin_headers,
    )
    assert response.json()["result"] == "checked_in"


@pytest.mark.asyncio
async def test_driver_scan_wrong_route(client: AsyncClient, db_session, rider, driver_headers, make_booking):
    """A code for another route is reported as not found and nothing changes."""
    booking = await make_booking(rider, route_id="m2")

    response = await client.post(
        "/api/v1/checkin/scan",
        json={"code": booking.id, "route_id": "m1"},
        headers=driver_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["result"] == "not_found"
    assert data["message"] == "Passenger not found for this route today"
    assert data["booking"] is None

    stored = await booking_store.get_booking(db_session, booking.id)
    assert stored.status == "WAITING"
    assert stored.check_in_time is None


@pytest.mark.asyncio
async def test_driver_scan_other_day(client: AsyncClient, rider, driver_headers, make_booking):
    booking = await make_booking(rider, route_id="m1", day=today() + timedelta(days=1))
    response = await client.post(
        "/api/v1/checkin/scan",
        json={"code": booking.id, "route_id": "m1"},
        headers=driver_headers,
    )
    assert response.json()["result"] == "not_found"


@pytest.mark.asyncio
async def test_driver_scan_ignores_cancelled(client: AsyncClient, rider, driver_headers, make_booking):
    booking = await make_booking(rider, route_id="m1", status=BookingStatus.CANCELLED)
    response = await client.post(
        "/api/v1/checkin/scan",
        json={"code": booking.id, "route_id": "m1"},
        headers=driver_headers,
    )
    assert response.json()["result"] == "not_found"


@pytest.mark.asyncio
async def test_admin_scan_unknown_code(client: AsyncClient, admin_headers):
    response = await client.post(
        "/api/v1/checkin/scan",
        json={"code": "ZZZZZZZZZ"},
        headers=admin_headers,
    )
    data = response.json()
    assert data["result"] == "not_found"
    assert data["message"] == "Unknown QR code"


@pytest.mark.asyncio
async def test_admin_scan_already_completed(client: AsyncClient, db_session, rider, admin_headers, make_booking):
    """Re-scanning a finished booking is informational; the first check-in time stays."""
    booking = await make_booking(rider, status=BookingStatus.COMPLETED, check_in_time=1_700_000_000_000)

    response = await client.post(
        "/api/v1/checkin/scan",
        json={"code": booking.id},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["result"] == "already_terminal"
    assert data["status"] == "COMPLETED"
    assert data["message"] == f"Booking {booking.id[:6]} is already COMPLETED"

    stored = await booking_store.get_booking(db_session, booking.id)
    assert stored.check_in_time == 1_700_000_000_000


@pytest.mark.asyncio
async def test_scan_twice_keeps_first_check_in_time(client: AsyncClient, rider, admin_headers, make_booking):
    booking = await make_booking(rider)

    first = await client.post("/api/v1/checkin/scan", json={"code": booking.id}, headers=admin_headers)
    second = await client.post("/api/v1/checkin/scan", json={"code": booking.id}, headers=admin_headers)

    assert first.json()["result"] == "checked_in"
    assert second.json()["result"] == "already_terminal"
    assert second.json()["booking"]["status"] == "COMPLETED"
    assert second.json()["booking"]["check_in_time"] == first.json()["booking"]["check_in_time"]


@pytest.mark.asyncio
async def test_transition_to_completed_is_idempotent(db_session, rider, make_booking):
    created = await make_booking(rider)
    booking = await booking_store.get_booking(db_session, created.id)

    first = await transition(db_session, booking, BookingStatus.COMPLETED)
    stamped = first.check_in_time
    second = await transition(db_session, first, BookingStatus.COMPLETED)

    assert second.status == "COMPLETED"
    assert second.check_in_time == stamped

    changed = await booking_store.update_booking_status(
        db_session, created.id, BookingStatus.COMPLETED, allowed_from=[BookingStatus.WAITING],
    )
    assert changed is False
    stored = await booking_store.get_booking(db_session, created.id)
    assert stored.check_in_time == stamped


@pytest.mark.asyncio
async def test_rider_cannot_scan(client: AsyncClient, rider, rider_headers, make_booking):
    booking = await make_booking(rider)
    response = await client.post("/api/v1/checkin/scan", json={"code": booking.id}, headers=rider_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_mark_no_show(client: AsyncClient, rider, driver_headers, make_booking):
    booking = await make_booking(rider)
    response = await client.patch(
        f"/api/v1/bookings/{booking.id}/status",
        json={"status": "NOSHOW"},
        headers=driver_headers,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "NOSHOW"


@pytest.mark.asyncio
async def test_no_show_after_check_in_rejected(client: AsyncClient, rider, admin_headers, make_booking):
    booking = await make_booking(rider, status=BookingStatus.COMPLETED, check_in_time=1)
    response = await client.patch(
        f"/api/v1/bookings/{booking.id}/status",
        json={"status": "NOSHOW"},
        headers=admin_headers,
    )
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "invalid_transition"


@pytest.mark.asyncio
async def test_staff_cannot_set_cancelled(client: AsyncClient, rider, admin_headers, make_booking):
    booking = await make_booking(rider)
    response = await client.patch(
        f"/api/v1/bookings/{booking.id}/status",
        json={"status": "CANCELLED"},
        headers=admin_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_rider_cannot_mark_status(client: AsyncClient, rider, rider_headers, make_booking):
    booking = await make_booking(rider)
    response = await client.patch(
        f"/api/v1/bookings/{booking.id}/status",
        json={"status": "COMPLETED"},
        headers=rider_headers,
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_cancel_frees_seat_and_stays_in_history(client: AsyncClient, catalog, rider, rider_headers, make_booking):
    """A cancelled booking no longer counts toward the route but is still listed."""
    tomorrow = today() + timedelta(days=1)
    booking = await make_booking(rider, route_id="m1", day=tomorrow)

    before = await client.get(f"/api/v1/routes/availability?date={tomorrow.isoformat()}", headers=rider_headers)
    assert next(r for r in before.json()["routes"] if r["route_id"] == "m1")["active"] == 1

    response = await client.post(f"/api/v1/bookings/{booking.id}/cancel", headers=rider_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "CANCELLED"

    after = await client.get(f"/api/v1/routes/availability?date={tomorrow.isoformat()}", headers=rider_headers)
    assert next(r for r in after.json()["routes"] if r["route_id"] == "m1")["active"] == 0

    history = await client.get("/api/v1/bookings/me", headers=rider_headers)
    assert [(b["id"], b["status"]) for b in history.json()] == [(booking.id, "CANCELLED")]


@pytest.mark.asyncio
async def test_cancel_twice_is_harmless(client: AsyncClient, rider, rider_headers, make_booking):
    booking = await make_booking(rider)
    await client.post(f"/api/v1/bookings/{booking.id}/cancel", headers=rider_headers)
    response = await client.post(f"/api/v1/bookings/{booking.id}/cancel", headers=rider_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "CANCELLED"


@pytest.mark.asyncio
async def test_cancel_completed_rejected(client: AsyncClient, rider, rider_headers, make_booking):
    booking = await make_booking(rider, status=BookingStatus.COMPLETED, check_in_time=1)
    response = await client.post(f"/api/v1/bookings/{booking.id}/cancel", headers=rider_headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_cancel_someone_elses_booking(client: AsyncClient, rider, other_rider_headers, make_booking):
    booking = await make_booking(rider)
    response = await client.post(f"/api/v1/bookings/{booking.id}/cancel", headers=other_rider_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_roster_groups_by_station(client: AsyncClient, catalog, rider, other_rider, driver_headers, make_booking):
    await make_booking(rider, route_id="m1", station_name="Saraburi Bus Terminal")
    await make_booking(other_rider, route_id="m1", station_name="Nong Khae Market",
                       status=BookingStatus.COMPLETED, check_in_time=1)
    await make_booking(other_rider, route_id="m1", time="06:45", station_name="Nong Khae Market",
                       status=BookingStatus.CANCELLED)
    await make_booking(rider, route_id="m2", time="07:00")

    response = await client.get("/api/v1/checkin/roster/m1", headers=driver_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert data["checked_in"] == 1
    assert sorted(data["stations"]) == ["Nong Khae Market", "Saraburi Bus Terminal"]
    assert len(data["stations"]["Nong Khae Market"]) == 1


@pytest.mark.asyncio
async def test_roster_unknown_route(client: AsyncClient, catalog, driver_headers):
    response = await client.get("/api/v1/checkin/roster/zz1", headers=driver_headers)
    assert response.status_code == 404


def test_driver_capabilities():
    user = UserResponse(id="u1", employee_code="1", name="A", department="B", phone="C", role="driver")
    ctx = SessionContext(user=user, language="th")
    assert ctx.is_staff
    assert ctx.can("check_in")
    assert ctx.can("mark_no_show")
    assert not ctx.can("book")
    assert not ctx.can("report")
    assert not ctx.can("scan_any")


@pytest.mark.asyncio
async def test_driver_scan_requires_route(client: AsyncClient, db_session, rider, driver_headers, make_booking):
    """A driver cannot fall back to the all-bookings search by leaving the route out."""
    booking = await make_booking(rider, route_id="m2", day=today() + timedelta(days=3))

    response = await client.post(
        "/api/v1/checkin/scan",
        json={"code": booking.id},
        headers=driver_headers,
    )
    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "validation_error"

    stored = await booking_store.get_booking(db_session, booking.id)
    assert stored.status == BookingStatus.WAITING.value
    assert stored.check_in_time is None
