"""Listing Reviews — one rating per user per listing, with listing and agent aggregates.

Invariants:
    - Only active listings accept reviews
    - After any review change, listing.average_rating/rating_count and the agent's
      average_rating (across all the agent's listings) match the stored reviews
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import ListingStatus, TimestampType, UserRole
from app.core.errors import BusinessRuleError, ConflictError, PermissionDeniedError
from app.core.listing_rules import compute_rating
from app.models.listing import Listing
from app.models.listing_review import ListingReview
from app.models.user import User
from app.schemas.listing import ReviewCreate
from app.services.lookups import get_or_404
from app.services.timestamps import touch

logger = logging.getLogger(__name__)


async def recompute_listing_rating(db: AsyncSession, listing: Listing) -> None:
    result = await db.execute(
        select(ListingReview.rating).where(ListingReview.listing_id == listing.id)
    )
    listing.average_rating, listing.rating_count = compute_rating(list(result.scalars()))


async def recompute_agent_rating(db: AsyncSession, agent_id: UUID | None) -> None:
    if agent_id is None:
        return
    agent = await db.get(User, agent_id)
    if agent is None:
        return
    result = await db.execute(
        select(ListingReview.rating)
        .join(Listing, Listing.id == ListingReview.listing_id)
        .where(Listing.created_by == agent_id)
    )
    agent.average_rating, _ = compute_rating(list(result.scalars()))


async def add_review(
    db: AsyncSession, user: User, listing_id: UUID, body: ReviewCreate,
) -> ListingReview:
    listing = await get_or_404(db, Listing, listing_id, "Listing")
    if listing.status != ListingStatus.ACTIVE.value:
        raise BusinessRuleError(
            "Only active listings can be reviewed.", "LISTING_NOT_ACTIVE",
        )
    existing = await db.execute(
        select(ListingReview.id)
        .where(ListingReview.listing_id == listing_id)
        .where(ListingReview.user_id == user.id)
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("You have already reviewed this listing.")

    review = ListingReview(
        listing_id=listing_id, user_id=user.id,
        rating=body.rating, comment=body.comment.strip(),
    )
    db.add(review)
    await db.flush()
    await recompute_listing_rating(db, listing)
    await recompute_agent_rating(db, listing.created_by)
    await touch(db, TimestampType.REVIEW, TimestampType.LISTING)
    await db.commit()
    logger.info(
        "Review added", extra={"user_id": str(user.id), "resource": str(listing_id)},
    )
    return review


async def delete_review(
    db: AsyncSession, user: User, listing_id: UUID, review_id: UUID,
) -> None:
    review = await get_or_404(db, ListingReview, review_id, "Review")
    if review.listing_id != listing_id:
        raise BusinessRuleError("Review does not belong to this listing.")
    if review.user_id != user.id and user.role != UserRole.ADMIN.value:
        raise PermissionDeniedError("You can only delete your own reviews.")
    listing = await get_or_404(db, Listing, listing_id, "Listing")

    await db.delete(review)
    await db.flush()
    await recompute_listing_rating(db, listing)
    await recompute_agent_rating(db, listing.created_by)
    await touch(db, TimestampType.REVIEW, TimestampType.LISTING)
    await db.commit()
    logger.info("Review deleted", extra={"user_id": str(user.id), "resource": str(review_id)})
