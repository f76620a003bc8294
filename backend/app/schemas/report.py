"""Report Schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from app.core.domain_types import ReportStatus
from app.schemas.common import OrmModel


class ReportCreate(BaseModel):
    fullname: str = Field(min_length=1, max_length=200)
    email: EmailStr
    number: str = Field(min_length=1, max_length=40)
    category: str = Field(min_length=1, max_length=100)
    message: str = Field(min_length=1, max_length=5000)
    listing_id: UUID
    captcha_token: str | None = None


class ReportOut(OrmModel):
    id: UUID
    fullname: str
    email: str
    number: str
    category: str
    message: str
    listing_id: UUID | None = None
    agent_id: UUID | None = None
    country: str | None = None
    status: str
    created_at: datetime


class ReportStatusUpdate(BaseModel):
    status: ReportStatus
