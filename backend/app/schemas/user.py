"""User Schemas — auth, account self-service and admin user management.

Invariants:
    - Emails validated with EmailStr and lowercased
    - Register role limited to User | Agent (admins are never self-registered)
    - Password length rules live in core/security.py so every flow reports the same message
"""

from datetime import datetime
from typing import Annotated, Literal
from uuid import UUID

from pydantic import AfterValidator, BaseModel, EmailStr, Field

from app.core.domain_types import KycStatus, UserRole, UserStatus
from app.schemas.common import OrmModel


def _lower(v: str) -> str:
    return v.strip().lower()


LowerEmail = Annotated[EmailStr, AfterValidator(_lower)]


class Socials(BaseModel):
    facebook: str | None = None
    instagram: str | None = None
    linkedin: str | None = None
    twitter: str | None = None
    tiktok: str | None = None
    whatsapp: str | None = None


class Address(BaseModel):
    address: str = Field(min_length=1, max_length=500)
    city: str | None = Field(None, max_length=100)
    state: str = Field(min_length=1, max_length=100)
    country: str = Field("Nigeria", max_length=100)
    zip_code: str | None = Field(None, max_length=20)


# ─── Responses ───────────────────────────────────────────────────

class UserOut(OrmModel):
    """Full account view (self and admin)."""
    id: UUID
    email: str
    firstname: str
    middlename: str | None = None
    lastname: str | None = None
    number: str | None = None
    socials: dict = {}
    description: str | None = None
    organization: str | None = None
    website_url: str | None = None
    username: str | None = None
    nin: str | None = None
    country: str
    state: str
    address: dict | None = None
    role: str
    status: str
    kyc_status: str
    profile_photo: dict
    total_listings: int
    average_rating: float
    views: int
    subscription_id: UUID | None = None
    subscribed: bool
    plan: str | None = None
    listing_limit: int | None = None
    created_at: datetime
    updated_at: datetime


class AgentSummary(OrmModel):
    """Public agent card shown next to listings."""
    id: UUID
    firstname: str
    lastname: str | None = None
    email: str
    number: str | None = None
    socials: dict = {}
    organization: str | None = None
    profile_photo: dict
    kyc_status: str
    average_rating: float
    total_listings: int


class UserSummary(OrmModel):
    id: UUID
    firstname: str
    lastname: str | None = None
    email: str


# ─── Auth ────────────────────────────────────────────────────────

class RegisterRequest(BaseModel):
    email: LowerEmail
    firstname: str = Field(min_length=1, max_length=100)
    lastname: str | None = Field(None, max_length=100)
    password: str = Field(max_length=128)
    role: Literal["User", "Agent"] = "User"


class LoginRequest(BaseModel):
    email: LowerEmail
    password: str = Field(min_length=1, max_length=128)


class CodeRequest(BaseModel):
    email: LowerEmail


class CodeVerifyRequest(BaseModel):
    email: LowerEmail
    code: str = Field(min_length=1, max_length=10)


class PasswordResetRequest(BaseModel):
    email: LowerEmail
    code: str = Field(min_length=1, max_length=10)
    new_password: str = Field(max_length=128)
    confirm_password: str = Field(max_length=128)


# ─── Account ─────────────────────────────────────────────────────

class EmailChangeRequest(BaseModel):
    new_email: LowerEmail
    code: str = Field(min_length=1, max_length=10)


class NameUpdate(BaseModel):
    firstname: str = Field(min_length=1, max_length=100)
    lastname: str | None = Field(None, max_length=100)


class PasswordChange(BaseModel):
    current_password: str = Field(min_length=1, max_length=128)
    new_password: str = Field("", max_length=128)
    confirm_password: str = Field("", max_length=128)


class ProfileUpdate(BaseModel):
    socials: Socials = Socials()
    description: str | None = Field(None, max_length=5000)
    organization: str | None = Field(None, max_length=200)
    website_url: str | None = Field(None, max_length=500)
    username: str | None = Field(None, max_length=100)
    nin: str | None = Field(None, max_length=40)
    number: str | None = Field(None, max_length=40)


# ─── Admin ───────────────────────────────────────────────────────

class AdminUserUpdate(BaseModel):
    firstname: str = Field(min_length=1, max_length=100)
    middlename: str | None = Field(None, max_length=100)
    lastname: str | None = Field(None, max_length=100)
    number: str | None = Field(None, max_length=40)
    email: LowerEmail
    role: UserRole
    status: UserStatus


class KycUpdate(BaseModel):
    kyc_status: KycStatus

