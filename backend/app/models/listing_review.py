"""ListingReview ORM — a user's 1-5 star rating of a listing.

Invariants:
    - One review per (listing_id, user_id)
    - rating in 1..5 (enforced by schema and CHECK constraint)
"""

import uuid

from sqlalchemy import CheckConstraint, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base, TimestampMixin


class ListingReview(TimestampMixin, Base):
    __tablename__ = "listing_reviews"
    __table_args__ = (
        UniqueConstraint("listing_id", "user_id", name="uq_listing_review_author"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_listing_review_rating"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    listing_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("listings.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False, default="")
