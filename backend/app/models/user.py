"""User ORM — accounts for visitors, agents and admins.

Invariants:
    - email unique, stored lowercased and trimmed
    - password_hash never serialized (schemas/user.py omits it)
    - listing_limit None means unlimited (Professional plan)
    - total_listings never negative (services clamp on decrement)

Design Decisions:
    - Single table for all roles: Admin is a role, not a separate collection
    - subscription_id is a plain UUID (no FK): subscriptions already reference users,
      a second FK would make the two tables mutually dependent
    - socials, profile_photo and address as JSON: embedded sub-documents; only
      socials.whatsapp is ever matched (uniqueness check on profile update)
"""

import uuid

from sqlalchemy import Boolean, Float, Integer, String, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base, TimestampMixin

DEFAULT_PROFILE_PHOTO = {
    "url": "https://www.househunter.ng/favicon.png",
    "public_id": None,
}


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True,
    )
    firstname: Mapped[str] = mapped_column(String(100), nullable=False)
    middlename: Mapped[str | None] = mapped_column(String(100), nullable=True)
    lastname: Mapped[str | None] = mapped_column(String(100), nullable=True)
    number: Mapped[str | None] = mapped_column(String(40), nullable=True)
    socials: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    organization: Mapped[str | None] = mapped_column(String(200), nullable=True)
    website_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    username: Mapped[str | None] = mapped_column(String(100), nullable=True)
    nin: Mapped[str | None] = mapped_column(String(40), nullable=True)
    country: Mapped[str] = mapped_column(
        String(100), nullable=False, default="Nigeria",
    )
    state: Mapped[str] = mapped_column(
        String(100), nullable=False, default="Abia State",
    )
    address: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="User")
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="active",
    )
    kyc_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="unverified",
    )
    password_hash: Mapped[str | None] = mapped_column(String(100), nullable=True)
    profile_photo: Mapped[dict] = mapped_column(
        JSON, nullable=False, default=lambda: dict(DEFAULT_PROFILE_PHOTO),
    )
    total_listings: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    average_rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Subscription state (denormalized from the active Subscription row)
    subscription_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), nullable=True,
    )
    subscribed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    plan: Mapped[str | None] = mapped_column(String(20), nullable=True)
    listing_limit: Mapped[int | None] = mapped_column(
        Integer, nullable=True, default=1,
    )
