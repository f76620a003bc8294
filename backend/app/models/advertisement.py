"""Advertisement ORM — a paid banner placement with a slot position and expiry.

Invariants:
    - status in AdvertisementStatus; ad_type in AdType
    - position set only while active; cleared on expiry or any non-active status
    - email stored lowercased
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base, TimestampMixin, _utcnow


class Advertisement(TimestampMixin, Base):
    __tablename__ = "advertisements"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    fullname: Mapped[str] = mapped_column(String(200), nullable=False)
    company: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    number: Mapped[str] = mapped_column(String(40), nullable=False)
    link: Mapped[str] = mapped_column(String(500), nullable=False)
    information: Mapped[str] = mapped_column(Text, nullable=False)
    country: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending", index=True,
    )
    ad_type: Mapped[str] = mapped_column(String(50), nullable=False)
    position: Mapped[int | None] = mapped_column(Integer, nullable=True)
    image: Mapped[dict] = mapped_column(JSON, nullable=False)
    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    expiry_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
