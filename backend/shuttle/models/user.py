"""
Employee accounts. Riders register themselves; the admin and driver
identities are reserved login codes and never stored here.
"""

import uuid

from sqlalchemy import Column, String, CheckConstraint

from shuttle.db.base import Base, TimestampMixin


def _new_user_id() -> str:
    return str(uuid.uuid4())


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_user_id)
    employee_code = Column(String(32), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    department = Column(String(255), nullable=False, default="")
    phone = Column(String(32), nullable=False, default="")
    role = Column(String(16), nullable=False, default="rider")

    __table_args__ = (
        CheckConstraint("role IN ('rider', 'admin', 'driver')", name="check_user_role"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, employee_code={self.employee_code}, role={self.role})>"
