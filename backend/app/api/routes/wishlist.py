"""Wishlist Routes — the signed-in user's saved listings."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.infrastructure.database import get_db
from app.models.user import User
from app.schemas.common import dump
from app.schemas.listing import ListingOut
from app.services import wishlist as wishlist_service

router = APIRouter(prefix="/api/v1/wishlist", tags=["wishlist"])


async def _wishlist_body(db: AsyncSession, user: User, message: str) -> dict:
    listings = await wishlist_service.saved_listings(db, user)
    return {"message": message, "listings": dump(ListingOut, listings)}


@router.get("")
async def get_wishlist(
    user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    return await _wishlist_body(db, user, "Wishlist fetched")


@router.post("/{listing_id}")
async def add_to_wishlist(
    listing_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await wishlist_service.save_listing(db, user, listing_id)
    return await _wishlist_body(db, user, "Listing saved")


@router.delete("/{listing_id}")
async def remove_from_wishlist(
    listing_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await wishlist_service.remove_listing(db, user, listing_id)
    return await _wishlist_body(db, user, "Listing removed")
