from sqlalchemy import Column, Integer, Text

from shuttle.db.base import Base, TimestampMixin


class News(Base, TimestampMixin):
    __tablename__ = "news"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content = Column(Text, nullable=False)
