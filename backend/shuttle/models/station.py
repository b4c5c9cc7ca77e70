from sqlalchemy import Column, Float, String

from shuttle.db.base import Base, TimestampMixin


class Station(Base, TimestampMixin):
    __tablename__ = "stations"

    id = Column(String(32), primary_key=True)
    name = Column(String(255), nullable=False)
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
    description = Column(String(1000), nullable=False, default="")

    def __repr__(self) -> str:
        return f"<Station(id={self.id}, name={self.name})>"
