"""Initial schema: users, route catalog, stations, bookings, news.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("employee_code", sa.String(32), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("department", sa.String(255), nullable=False, server_default=""),
        sa.Column("phone", sa.String(32), nullable=False, server_default=""),
        sa.Column("role", sa.String(16), nullable=False, server_default="rider"),
        *_timestamps(),
        sa.CheckConstraint("role IN ('rider', 'admin', 'driver')", name="check_user_role"),
    )
    op.create_index("ix_users_employee_code", "users", ["employee_code"], unique=True)

    op.create_table(
        "routes",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("time", sa.String(5), nullable=False),
        sa.Column("shift", sa.String(16), nullable=False),
        sa.Column("direction", sa.String(16), nullable=False),
        sa.Column("overtime", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("max_seats", sa.Integer(), nullable=False, server_default=sa.text("40")),
        sa.Column("description", sa.String(1000), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("max_seats > 0", name="check_route_max_seats_positive"),
        sa.CheckConstraint("shift IN ('morning', 'evening', 'night')", name="check_route_shift"),
        sa.CheckConstraint("direction IN ('inbound', 'outbound')", name="check_route_direction"),
    )

    # Keyed by route id without a foreign key; details outlive a schedule rebuild
    op.create_table(
        "route_details",
        sa.Column("route_id", sa.String(32), primary_key=True),
        sa.Column("license_plate", sa.String(32), nullable=True),
        sa.Column("driver_phone", sa.String(32), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "stations",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("lat", sa.Float(), nullable=False),
        sa.Column("lng", sa.Float(), nullable=False),
        sa.Column("description", sa.String(1000), nullable=False, server_default=""),
        *_timestamps(),
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(16), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("user_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("route_id", sa.String(32), nullable=False),
        sa.Column("route_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("station_id", sa.String(32), nullable=False, server_default=""),
        sa.Column("station_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("timestamp", sa.BigInteger(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="WAITING"),
        sa.Column("check_in_time", sa.BigInteger(), nullable=True),
        sa.Column("shift", sa.String(16), nullable=True),
        sa.Column("direction", sa.String(16), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('BOOKED', 'WAITING', 'COMPLETED', 'CANCELLED', 'NOSHOW')",
            name="check_booking_status",
        ),
    )
    # Rider history and the duplicate check read by user
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    # Seat counts, rosters and daily reports read one route (or all) for a day
    op.create_index("ix_bookings_route_timestamp", "bookings", ["route_id", "timestamp"])

    op.create_table(
        "news",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("content", sa.Text(), nullable=False),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table("news")
    op.drop_index("ix_bookings_route_timestamp", table_name="bookings")
    op.drop_index("ix_bookings_user_id", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("stations")
    op.drop_table("route_details")
    op.drop_table("routes")
    op.drop_index("ix_users_employee_code", table_name="users")
    op.drop_table("users")
