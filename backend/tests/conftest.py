"""
Pytest fixtures for test database, client, and authentication.

Every test gets a fresh in-memory SQLite database; the API dependency is
overridden so each request opens its own session against it, the same way
production requests do.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["REDIS_ENABLED"] = "false"
os.environ["SEAT_POLICY"] = "best_effort"

from datetime import date  # noqa: E402
from typing import AsyncGenerator, Callable, Optional  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from shuttle.main import app  # noqa: E402
from shuttle.core.clock import combine, today  # noqa: E402
from shuttle.core.security import create_access_token  # noqa: E402
from shuttle.db.base import Base  # noqa: E402
from shuttle.db.session import get_db  # noqa: E402
from shuttle.models.booking import Booking, BookingStatus  # noqa: E402
from shuttle.schemas.booking import BookingResponse  # noqa: E402
from shuttle.schemas.user import UserCreate, UserResponse  # noqa: E402
from shuttle.services.auth_service import register_user, reserved_identities  # noqa: E402
from shuttle.services.booking_store import new_booking_id  # noqa: E402
from shuttle.services.catalog_service import seed_catalog  # noqa: E402
from shuttle.services.local_store import local_settings  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture(scope="function")
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh schema on a single shared in-memory connection."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def clear_local_settings():
    local_settings.clear()
    yield
    local_settings.clear()


@pytest_asyncio.fixture
async def catalog(session_factory) -> None:
    """Built-in routes and stations written to the database."""
    async with session_factory() as session:
        await seed_catalog(session)


async def _register(session_factory, code: str, name: str) -> UserResponse:
    async with session_factory() as session:
        user = await register_user(session, UserCreate(
            employee_code=code,
            name=name,
            department="Production",
            phone="089-000-0000",
        ))
        return UserResponse.model_validate(user)


@pytest_asyncio.fixture
async def rider(session_factory) -> UserResponse:
    return await _register(session_factory, "10001", "Somchai Jaidee")


@pytest_asyncio.fixture
async def other_rider(session_factory) -> UserResponse:
    return await _register(session_factory, "10002", "Malee Srisuk")


@pytest.fixture
def admin() -> UserResponse:
    return reserved_identities()["9999"]


@pytest.fixture
def driver() -> UserResponse:
    return reserved_identities()["8888"]


def headers_for(user: UserResponse) -> dict:
    token = create_access_token(data={"sub": user.id, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def rider_headers(rider: UserResponse) -> dict:
    return headers_for(rider)


@pytest.fixture
def other_rider_headers(other_rider: UserResponse) -> dict:
    return headers_for(other_rider)


@pytest.fixture
def admin_headers(admin: UserResponse) -> dict:
    return headers_for(admin)


@pytest.fixture
def driver_headers(driver: UserResponse) -> dict:
    return headers_for(driver)


@pytest_asyncio.fixture
async def make_booking(session_factory) -> Callable:
    """Insert a booking row directly, bypassing the allocation rules."""

    async def _make(
        user: UserResponse,
        route_id: str = "m1",
        station_id: str = "s1",
        day: Optional[date] = None,
        time: str = "06:30",
        status: BookingStatus = BookingStatus.WAITING,
        check_in_time: Optional[int] = None,
        station_name: str = "Main Gate",
    ) -> BookingResponse:
        booking = Booking(
            id=new_booking_id(),
            user_id=user.id,
            user_name=user.name,
            route_id=route_id,
            route_name=f"Route {route_id}",
            station_id=station_id,
            station_name=station_name,
            timestamp=combine(day or today(), time),
            status=status.value,
            check_in_time=check_in_time,
            shift="morning",
            direction="inbound",
        )
        async with session_factory() as session:
            session.add(booking)
            await session.commit()
            return BookingResponse.model_validate(booking)

    return _make
