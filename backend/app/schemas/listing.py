"""Listing Schemas — location payload, listing views, status actions and reviews.

Invariants:
    - Location requires state, area and locality
    - StatusUpdate.status is free text here; core/listing_rules.parse_status_action
      maps it to a status or placement action and rejects the rest with 400
    - Review rating in 1..5
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.common import OrmModel


class Location(BaseModel):
    state: str = Field(min_length=1, max_length=100)
    area: str = Field(min_length=1, max_length=100)
    locality: str = Field(min_length=1, max_length=200)
    zip_code: str | None = Field(None, max_length=20)
    street: str | None = Field(None, max_length=300)


class ListingOut(OrmModel):
    id: UUID
    title: str
    purpose: str
    location: dict
    category: str | None = None
    sub_category: str | None = None
    price: float
    denomination: str
    installment_payment: bool
    append_to: str | None = None
    bedrooms: int | None = None
    bathrooms: int | None = None
    toilets: int | None = None
    area_size: str | None = None
    description: str | None = None
    features: list = []
    youtube_video: str | None = None
    instagram_video: str | None = None
    virtual_tour: str | None = None
    images: list = []
    documents: list = []
    coordinates: dict | None = None
    created_by: UUID | None = None
    status: str
    is_featured: bool
    on_homepage: bool
    views: int
    average_rating: float
    rating_count: int
    created_at: datetime
    updated_at: datetime


class StatusUpdate(BaseModel):
    status: str = Field(min_length=1, max_length=40)


class ReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: str = Field("", max_length=2000)


class ReviewOut(OrmModel):
    id: UUID
    listing_id: UUID
    user_id: UUID
    rating: int
    comment: str
    created_at: datetime


class ListingFields(BaseModel):
    """Editable listing fields, parsed from the multipart create/update forms."""
    title: str = Field(min_length=1, max_length=300)
    purpose: str = Field(min_length=1, max_length=50)
    location: Location
    category: str | None = Field(None, max_length=100)
    sub_category: str | None = Field(None, max_length=100)
    price: float = Field(ge=0)
    denomination: str = Field("NGN", max_length=10)
    installment_payment: bool = False
    append_to: str | None = Field(None, max_length=100)
    bedrooms: int | None = Field(None, ge=0)
    bathrooms: int | None = Field(None, ge=0)
    toilets: int | None = Field(None, ge=0)
    area_size: str | None = Field(None, max_length=100)
    description: str | None = Field(None, max_length=20_000)
    features: list[str] = []
    youtube_video: str | None = Field(None, max_length=500)
    instagram_video: str | None = Field(None, max_length=500)
    virtual_tour: str | None = Field(None, max_length=500)
    documents: list[str] = []
    coordinates: dict | None = None
