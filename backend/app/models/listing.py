"""Listing ORM — a real-estate unit for sale or rent.

Invariants:
    - status in ListingStatus (pending → active → sold | rented | archived)
    - At most one row has is_featured=True (services/listings.py clears the rest first)
    - images is an ordered list of {url, public_id}; public_id identifies the media-host asset
    - average_rating / rating_count recomputed from listing_reviews on every review change

Design Decisions:
    - location, coordinates, images, features, documents as JSON: embedded sub-documents
    - created_by SET NULL on user delete: listings outlive accounts until an admin removes them
"""

import uuid

from sqlalchemy import (
    Boolean, Float, ForeignKey, Integer, String, Text, JSON,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base, TimestampMixin


class Listing(TimestampMixin, Base):
    __tablename__ = "listings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    purpose: Mapped[str] = mapped_column(String(50), nullable=False)
    location: Mapped[dict] = mapped_column(JSON, nullable=False)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    sub_category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    denomination: Mapped[str] = mapped_column(
        String(10), nullable=False, default="NGN",
    )
    installment_payment: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    append_to: Mapped[str | None] = mapped_column(String(100), nullable=True)
    bedrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bathrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    toilets: Mapped[int | None] = mapped_column(Integer, nullable=True)
    area_size: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    features: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    youtube_video: Mapped[str | None] = mapped_column(String(500), nullable=True)
    instagram_video: Mapped[str | None] = mapped_column(String(500), nullable=True)
    virtual_tour: Mapped[str | None] = mapped_column(String(500), nullable=True)
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    documents: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    coordinates: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    created_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True, index=True,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending", index=True,
    )
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    on_homepage: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    average_rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rating_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
