"""Advertisement Schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.core.domain_types import AdvertisementStatus
from app.schemas.common import OrmModel


class AdvertisementOut(OrmModel):
    id: UUID
    fullname: str
    company: str
    email: str
    number: str
    link: str
    information: str
    country: str
    status: str
    ad_type: str
    position: int | None = None
    image: dict
    start_date: datetime
    expiry_date: datetime
    created_at: datetime


class AdvertStatusUpdate(BaseModel):
    status: AdvertisementStatus
    position: int | None = Field(None, ge=0)
    duration_days: int | None = Field(None, ge=1, le=3650)
