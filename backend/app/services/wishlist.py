"""Wishlist — per-user saved listings.

Invariants:
    - save and remove are idempotent
    - Saving a missing listing gives 404; removing one that is not saved is a no-op
"""

import logging
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import TimestampType
from app.models.favorite import Favorite
from app.models.listing import Listing
from app.models.user import User
from app.services.lookups import get_or_404
from app.services.timestamps import touch

logger = logging.getLogger(__name__)


async def saved_listings(db: AsyncSession, user: User) -> list[Listing]:
    result = await db.execute(
        select(Listing)
        .join(Favorite, Favorite.listing_id == Listing.id)
        .where(Favorite.user_id == user.id)
        .order_by(Favorite.created_at.desc())
    )
    return list(result.scalars())


async def save_listing(db: AsyncSession, user: User, listing_id: UUID) -> None:
    await get_or_404(db, Listing, listing_id, "Listing")
    if await db.get(Favorite, (user.id, listing_id)) is None:
        db.add(Favorite(user_id=user.id, listing_id=listing_id))
    await touch(db, TimestampType.FAVOURITE)
    await db.commit()
    logger.info("Listing saved", extra={"user_id": str(user.id), "resource": str(listing_id)})


async def remove_listing(db: AsyncSession, user: User, listing_id: UUID) -> None:
    await db.execute(
        delete(Favorite)
        .where(Favorite.user_id == user.id)
        .where(Favorite.listing_id == listing_id)
    )
    await touch(db, TimestampType.FAVOURITE)
    await db.commit()
    logger.info("Listing unsaved", extra={"user_id": str(user.id), "resource": str(listing_id)})
