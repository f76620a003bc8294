"""Enquiry Schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from app.schemas.common import OrmModel


class EnquiryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    number: str = Field(min_length=1, max_length=40)
    message: str = Field(min_length=1, max_length=5000)
    listing_id: UUID


class EnquiryOut(OrmModel):
    id: UUID
    name: str
    email: str
    number: str
    message: str
    listing_id: UUID
    agent_id: UUID | None = None
    agent_name: str
    agent_image: str
    is_read: bool
    country: str | None = None
    created_at: datetime
