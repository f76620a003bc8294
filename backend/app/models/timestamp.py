"""TimestampRecord ORM — per-resource-type cache invalidation marker.

Invariants:
    - type is the primary key (lowercase TimestampType value)
    - updated_at bumped by services/timestamps.touch() on every mutation of that type
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin


class TimestampRecord(TimestampMixin, Base):
    __tablename__ = "timestamps"

    type: Mapped[str] = mapped_column(String(40), primary_key=True)
