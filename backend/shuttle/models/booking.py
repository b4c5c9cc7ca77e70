"""
A rider's reservation of one seat on one route for one date.

Key design decisions:
- `id` is a short base-36 token that is also the QR payload
- user, route and station names are copied onto the row so history still
  renders after a rename
- `timestamp` / `check_in_time` are epoch milliseconds; calendar-day grouping
  happens in the service time zone
- No unique constraint on (user, route): the same route is booked once per
  day, and the duplicate rule is a 60 s window on `timestamp`
"""

import enum

from sqlalchemy import Column, BigInteger, String, Index, CheckConstraint

from shuttle.db.base import Base, TimestampMixin


class BookingStatus(str, enum.Enum):
    BOOKED = "BOOKED"
    WAITING = "WAITING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NOSHOW = "NOSHOW"


ACTIVE_STATUSES = (BookingStatus.BOOKED, BookingStatus.WAITING)
TERMINAL_STATUSES = (BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.NOSHOW)


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(String(16), primary_key=True)
    user_id = Column(String(36), nullable=False, index=True)
    user_name = Column(String(255), nullable=False, default="")
    route_id = Column(String(32), nullable=False)
    route_name = Column(String(255), nullable=False, default="")
    station_id = Column(String(32), nullable=False, default="")
    station_name = Column(String(255), nullable=False, default="")
    timestamp = Column(BigInteger, nullable=False)
    status = Column(String(16), nullable=False, default=BookingStatus.WAITING.value)
    check_in_time = Column(BigInteger, nullable=True)
    shift = Column(String(16), nullable=True)
    direction = Column(String(16), nullable=True)

    __table_args__ = (
        Index("ix_bookings_route_timestamp", "route_id", "timestamp"),
        CheckConstraint(
            "status IN ('BOOKED', 'WAITING', 'COMPLETED', 'CANCELLED', 'NOSHOW')",
            name="check_booking_status",
        ),
    )

    @property
    def is_active(self) -> bool:
        return self.status in (s.value for s in ACTIVE_STATUSES)

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, user={self.user_id}, route={self.route_id}, status={self.status})>"
