"""
Route schedule and the operational vehicle details layered on top of it.

Schedule rows change rarely (admin CRUD). Vehicle details (license plate,
driver phone) are edited day to day by drivers and admins and live in their
own table keyed by route id, so the schedule can be replaced without losing
them and vice versa.
"""

from sqlalchemy import Column, Integer, String, Boolean, CheckConstraint

from shuttle.db.base import Base, TimestampMixin


class Route(Base, TimestampMixin):
    __tablename__ = "routes"

    id = Column(String(32), primary_key=True)
    name = Column(String(255), nullable=False)
    time = Column(String(5), nullable=False)  # HH:MM
    shift = Column(String(16), nullable=False)
    direction = Column(String(16), nullable=False)
    overtime = Column(Boolean, nullable=False, default=False)
    max_seats = Column(Integer, nullable=False, default=40)
    description = Column(String(1000), nullable=True)

    __table_args__ = (
        CheckConstraint("max_seats > 0", name="check_route_max_seats_positive"),
        CheckConstraint("shift IN ('morning', 'evening', 'night')", name="check_route_shift"),
        CheckConstraint("direction IN ('inbound', 'outbound')", name="check_route_direction"),
    )

    def __repr__(self) -> str:
        return f"<Route(id={self.id}, time={self.time}, seats={self.max_seats})>"


class RouteDetail(Base, TimestampMixin):
    __tablename__ = "route_details"

    route_id = Column(String(32), primary_key=True)
    license_plate = Column(String(32), nullable=True)
    driver_phone = Column(String(32), nullable=True)
