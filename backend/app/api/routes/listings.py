"""Listing Routes — public catalogue, staff dashboard, status actions, edits and reviews.

Invariants:
    - Create/update arrive as multipart forms; JSON-valued fields (location, features,
      documents, coordinates, existing_images) are parsed and validated here
    - Public detail hides non-active listings (403); preview shows any status
    - Agent summaries never include password hashes
"""

import json
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, require_staff
from app.config import get_settings
from app.core.domain_types import ListingStatus, UserRole
from app.core.errors import InvalidInputError
from app.core.listing_rules import parse_bool_field
from app.infrastructure.clients import ExternalClients, get_clients
from app.infrastructure.database import get_db
from app.models.listing import Listing
from app.models.user import User
from app.schemas.common import dump, dump_with
from app.schemas.listing import (
    ListingFields, ListingOut, ReviewCreate, ReviewOut, StatusUpdate,
)
from app.schemas.user import AgentSummary, UserOut
from app.services import listings as listing_service
from app.services import reviews as review_service
from app.services.lookups import get_or_404

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/listings", tags=["listings"])


def _parse_json(raw: str | None, field: str, default):
    if raw is None or raw == "":
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        raise InvalidInputError(f"{field} must be valid JSON.", field=field)


def listing_form(
    title: str = Form(...),
    purpose: str = Form(...),
    location: str = Form(...),
    price: float = Form(...),
    category: str | None = Form(None),
    sub_category: str | None = Form(None),
    denomination: str = Form("NGN"),
    installment_payment: str | None = Form(None),
    append_to: str | None = Form(None),
    bedrooms: int | None = Form(None),
    bathrooms: int | None = Form(None),
    toilets: int | None = Form(None),
    area_size: str | None = Form(None),
    description: str | None = Form(None),
    features: str | None = Form(None),
    youtube_video: str | None = Form(None),
    instagram_video: str | None = Form(None),
    virtual_tour: str | None = Form(None),
    documents: str | None = Form(None),
    coordinates: str | None = Form(None),
) -> ListingFields:
    """Collect and validate the multipart listing fields."""
    try:
        return ListingFields(
            title=title,
            purpose=purpose,
            location=_parse_json(location, "location", None),
            price=price,
            category=category,
            sub_category=sub_category,
            denomination=denomination,
            installment_payment=parse_bool_field(installment_payment),
            append_to=append_to,
            bedrooms=bedrooms,
            bathrooms=bathrooms,
            toilets=toilets,
            area_size=area_size,
            description=description,
            features=_parse_json(features, "features", []),
            youtube_video=youtube_video,
            instagram_video=instagram_video,
            virtual_tour=virtual_tour,
            documents=_parse_json(documents, "documents", []),
            coordinates=_parse_json(coordinates, "coordinates", None),
        )
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(loc) for loc in first["loc"])
        raise InvalidInputError(f"{field}: {first['msg']}", field=field)


async def _read_all(files: list[UploadFile] | None) -> list[bytes]:
    return [await f.read() for f in files or []]


def _with_creator(rows) -> list[dict]:
    return dump_with(ListingOut, rows, "creator", AgentSummary)


async def _remaining_for(db: AsyncSession, user: User) -> list[dict]:
    owner = None if user.role == UserRole.ADMIN.value else user.id
    return _with_creator(await listing_service.list_with_creators(db, owner_id=owner))


# ─── Create ──────────────────────────────────────────────────────

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_listing(
    fields: ListingFields = Depends(listing_form),
    images: list[UploadFile] | None = File(None),
    user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    listing = await listing_service.create_listing(
        db, clients.media, clients.mail, user, fields, await _read_all(images),
    )
    return {"message": "Listing created successfully", "listing": dump(ListingOut, listing)}


# ─── Read ────────────────────────────────────────────────────────

@router.get("")
async def list_active(db: AsyncSession = Depends(get_db)):
    rows = await listing_service.list_with_creators(db, status=ListingStatus.ACTIVE)
    return {"message": "Listings fetched", "listings": _with_creator(rows)}


@router.get("/dashboard")
async def list_dashboard(
    user: User = Depends(require_staff), db: AsyncSession = Depends(get_db),
):
    rows = await listing_service.list_with_creators(db)
    return {"message": "Listings fetched", "listings": _with_creator(rows)}


@router.get("/mine")
async def list_mine(
    user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Listing)
        .where(Listing.created_by == user.id)
        .order_by(Listing.created_at.desc())
    )
    return {"message": "Listings fetched", "listings": dump(ListingOut, list(result.scalars()))}


@router.get("/{listing_id}")
async def get_listing(listing_id: UUID, db: AsyncSession = Depends(get_db)):
    listing, agent, reviews = await listing_service.get_listing_detail(
        db, listing_id, require_active=True,
    )
    return {
        "message": "Listing fetched",
        "listing": dump(ListingOut, listing),
        "agent": dump(UserOut, agent),
        "reviews": dump(ReviewOut, reviews),
    }


@router.get("/{listing_id}/preview")
async def preview_listing(listing_id: UUID, db: AsyncSession = Depends(get_db)):
    listing, agent, reviews = await listing_service.get_listing_detail(
        db, listing_id, require_active=False,
    )
    return {
        "message": "Listing fetched",
        "listing": dump(ListingOut, listing),
        "agent": dump(AgentSummary, agent),
        "reviews": dump(ReviewOut, reviews),
    }


@router.get("/{listing_id}/edit")
async def get_listing_for_edit(
    listing_id: UUID,
    user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    listing = await get_or_404(db, Listing, listing_id, "Listing")
    return {"message": "Listing fetched", "listing": dump(ListingOut, listing)}


# ─── Mutations ───────────────────────────────────────────────────

@router.put("/{listing_id}/status")
async def change_status(
    listing_id: UUID,
    body: StatusUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    listing = await listing_service.change_status(
        db, clients.mail, user, listing_id, body.status,
        get_settings().homepage_listing_limit,
    )
    return {"message": "Listing status updated", "listing": dump(ListingOut, listing)}


@router.put("/{listing_id}")
async def update_listing(
    listing_id: UUID,
    fields: ListingFields = Depends(listing_form),
    existing_images: str | None = Form(None),
    images: list[UploadFile] | None = File(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    kept = _parse_json(existing_images, "existing_images", [])
    if not isinstance(kept, list) or not all(isinstance(i, dict) for i in kept):
        raise InvalidInputError(
            "existing_images must be a list of images.", field="existing_images",
        )
    listing = await listing_service.update_listing(
        db, clients.media, user, listing_id, fields, kept, await _read_all(images),
    )
    return {"message": "Listing updated successfully", "listing": dump(ListingOut, listing)}


@router.delete("/{listing_id}")
async def delete_listing(
    listing_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    await listing_service.delete_listing(db, clients.media, user, listing_id)
    return {
        "message": "Listing deleted successfully",
        "listings": await _remaining_for(db, user),
    }


# ─── Reviews ─────────────────────────────────────────────────────

@router.post("/{listing_id}/reviews", status_code=status.HTTP_201_CREATED)
async def add_review(
    listing_id: UUID,
    body: ReviewCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    review = await review_service.add_review(db, user, listing_id, body)
    return {"message": "Review submitted", "review": dump(ReviewOut, review)}


@router.delete("/{listing_id}/reviews/{review_id}")
async def delete_review(
    listing_id: UUID,
    review_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await review_service.delete_review(db, user, listing_id, review_id)
    return {"message": "Review deleted"}
