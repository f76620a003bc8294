"""Listing Flows — create, read, status actions, update and cascade delete.

Invariants:
    - Agents cannot create beyond listing_limit (None = unlimited); Admins are exempt
    - Only the owner or an Admin may change, update or delete a listing
    - Featuring a listing un-features every other listing first
    - At most homepage_listing_limit listings carry on_homepage=True
    - total_listings never drops below 0
    - Deleting a listing removes its enquiries, reviews and favorites, and its media-host images

Design Decisions:
    - Images uploaded before the DB write: a failed upload leaves no half-created row
    - Media destroyed after the commit on update and delete: a failed commit never loses images
      that a surviving row still points to
"""

import logging
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import (
    ListingPlacement, ListingStatus, TimestampType, UserRole,
)
from app.core.errors import (
    BusinessRuleError, ErrorContext, PermissionDeniedError, ResourceNotFoundError,
)
from app.core.listing_rules import (
    can_manage_listing, homepage_has_room, parse_status_action, partition_images,
)
from app.core.plans import has_listing_capacity
from app.core.repository_protocols import MailSender, MediaStorage
from app.models.enquiry import Enquiry
from app.models.favorite import Favorite
from app.models.listing import Listing
from app.models.listing_review import ListingReview
from app.models.user import User
from app.schemas.listing import ListingFields
from app.services.lookups import get_or_404
from app.services.media_cleanup import destroy_quietly
from app.services.notifications import notify
from app.services.reviews import recompute_agent_rating
from app.services.timestamps import touch

logger = logging.getLogger(__name__)

MEDIA_FOLDER = "listings"


def _check_manage(listing: Listing, user: User) -> None:
    if not can_manage_listing(listing.created_by, user.id, user.role):
        raise PermissionDeniedError(
            "You are not allowed to modify this listing.",
            context=ErrorContext(user_id=str(user.id), resource=str(listing.id)),
        )


async def _upload_all(media: MediaStorage, files: list[bytes]) -> list[dict]:
    return [await media.upload(data, folder=MEDIA_FOLDER) for data in files]


# ─── Create ──────────────────────────────────────────────────────

async def create_listing(
    db: AsyncSession,
    media: MediaStorage,
    mail: MailSender,
    user: User,
    fields: ListingFields,
    files: list[bytes],
) -> Listing:
    if user.role == UserRole.AGENT.value and not has_listing_capacity(
        user.total_listings, user.listing_limit,
    ):
        raise BusinessRuleError(
            "You have reached your listing limit. Upgrade your plan to add more listings.",
            "LISTING_LIMIT_REACHED",
            context=ErrorContext(user_id=str(user.id)),
        )

    images = await _upload_all(media, files)
    listing = Listing(
        **fields.model_dump(mode="json"),
        images=images,
        created_by=user.id,
        status=ListingStatus.PENDING.value,
    )
    db.add(listing)
    user.total_listings = (user.total_listings or 0) + 1
    await touch(db, TimestampType.LISTING)
    await db.commit()
    await db.refresh(listing)
    logger.info(
        "Listing created", extra={"user_id": str(user.id), "resource": str(listing.id)},
    )

    await notify(
        mail, to=user.email, subject="Your listing has been submitted",
        template="listing_submitted.html",
        firstname=user.firstname, title=listing.title,
    )
    return listing


# ─── Read ────────────────────────────────────────────────────────

async def list_with_creators(
    db: AsyncSession, *, status: ListingStatus | None = None,
    owner_id: UUID | None = None,
) -> list[tuple[Listing, User | None]]:
    query = (
        select(Listing, User)
        .outerjoin(User, User.id == Listing.created_by)
        .order_by(Listing.created_at.desc())
    )
    if status is not None:
        query = query.where(Listing.status == status.value)
    if owner_id is not None:
        query = query.where(Listing.created_by == owner_id)
    result = await db.execute(query)
    return [(row.Listing, row.User) for row in result]


async def get_listing_detail(
    db: AsyncSession, listing_id: UUID, *, require_active: bool,
) -> tuple[Listing, User, list[ListingReview]]:
    """Load a listing for public display and count the view."""
    listing = await get_or_404(db, Listing, listing_id, "Listing")
    if require_active and listing.status != ListingStatus.ACTIVE.value:
        raise PermissionDeniedError("This listing is not available.")
    agent = await db.get(User, listing.created_by) if listing.created_by else None
    if agent is None:
        raise ResourceNotFoundError("Agent", str(listing.created_by))

    listing.views += 1
    await db.commit()

    result = await db.execute(
        select(ListingReview)
        .where(ListingReview.listing_id == listing_id)
        .order_by(ListingReview.created_at.desc())
    )
    return listing, agent, list(result.scalars())


# ─── Status & placement ──────────────────────────────────────────

async def change_status(
    db: AsyncSession,
    mail: MailSender,
    user: User,
    listing_id: UUID,
    raw_status: str,
    homepage_limit: int,
) -> Listing:
    action = parse_status_action(raw_status)
    listing = await get_or_404(db, Listing, listing_id, "Listing")
    _check_manage(listing, user)

    approved = False
    if action is ListingPlacement.FEATURED:
        await db.execute(
            update(Listing)
            .where(Listing.id != listing.id)
            .where(Listing.is_featured.is_(True))
            .values(is_featured=False)
        )
        listing.is_featured = True
    elif action is ListingPlacement.HOMEPAGE:
        if not listing.on_homepage:
            on_homepage = await db.scalar(
                select(func.count()).select_from(Listing)
                .where(Listing.on_homepage.is_(True))
            )
            if not homepage_has_room(on_homepage or 0, homepage_limit):
                raise BusinessRuleError(
                    f"Homepage limit reached. Only {homepage_limit} listings "
                    "can be on the homepage.",
                    "HOMEPAGE_LIMIT_REACHED",
                )
            listing.on_homepage = True
    elif action is ListingPlacement.REMOVE_FROM_HOMEPAGE:
        listing.on_homepage = False
    else:
        approved = (
            listing.status == ListingStatus.PENDING.value
            and action is ListingStatus.ACTIVE
        )
        listing.status = action.value

    await touch(db, TimestampType.LISTING, TimestampType.FAVOURITE)
    await db.commit()
    await db.refresh(listing)
    logger.info(
        f"Listing status action '{action.value}'",
        extra={"user_id": str(user.id), "resource": str(listing.id)},
    )

    if approved and listing.created_by:
        owner = await db.get(User, listing.created_by)
        if owner is not None:
            await notify(
                mail, to=owner.email, subject="Your listing is live",
                template="listing_approved.html",
                firstname=owner.firstname, title=listing.title,
            )
    return listing


# ─── Update ──────────────────────────────────────────────────────

async def update_listing(
    db: AsyncSession,
    media: MediaStorage,
    user: User,
    listing_id: UUID,
    fields: ListingFields,
    kept_images: list[dict],
    files: list[bytes],
) -> Listing:
    listing = await get_or_404(db, Listing, listing_id, "Listing")
    _check_manage(listing, user)

    still_kept, to_destroy = partition_images(listing.images or [], kept_images)
    uploaded = await _upload_all(media, files)

    for key, value in fields.model_dump(mode="json").items():
        setattr(listing, key, value)
    listing.images = still_kept + uploaded
    await touch(db, TimestampType.LISTING)
    await db.commit()
    await db.refresh(listing)
    logger.info(
        f"Listing updated ({len(to_destroy)} images removed, {len(uploaded)} added)",
        extra={"user_id": str(user.id), "resource": str(listing.id)},
    )

    for image in to_destroy:
        await destroy_quietly(media, image.get("public_id"))
    return listing


# ─── Delete ──────────────────────────────────────────────────────

async def delete_listing(
    db: AsyncSession, media: MediaStorage, user: User, listing_id: UUID,
) -> None:
    listing = await get_or_404(db, Listing, listing_id, "Listing")
    _check_manage(listing, user)
    images = list(listing.images or [])
    owner_id = listing.created_by

    if owner_id is not None:
        owner = await db.get(User, owner_id)
        if owner is not None:
            owner.total_listings = max(0, (owner.total_listings or 0) - 1)

    await db.execute(delete(Enquiry).where(Enquiry.listing_id == listing_id))
    await db.execute(delete(ListingReview).where(ListingReview.listing_id == listing_id))
    await db.execute(delete(Favorite).where(Favorite.listing_id == listing_id))
    await db.delete(listing)
    await db.flush()
    await recompute_agent_rating(db, owner_id)
    await touch(
        db,
        TimestampType.USER, TimestampType.REVIEW, TimestampType.ENQUIRY,
        TimestampType.LISTING, TimestampType.FAVOURITE,
    )
    await db.commit()
    logger.info(
        "Listing deleted", extra={"user_id": str(user.id), "resource": str(listing_id)},
    )

    for image in images:
        await destroy_quietly(media, image.get("public_id"))
