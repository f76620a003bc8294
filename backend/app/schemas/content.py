"""Content Schemas — FAQs, blogs, comments, testimonials, contacts, newsletter, projects."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from app.core.domain_types import PublicationStatus
from app.schemas.common import OrmModel


class FaqCreate(BaseModel):
    question: str = Field(min_length=1, max_length=2000)
    answer: str = Field(min_length=1, max_length=10_000)


class FaqOut(OrmModel):
    id: UUID
    question: str
    answer: str
    status: str
    created_at: datetime


class PublicationUpdate(BaseModel):
    status: PublicationStatus


class BlogOut(OrmModel):
    id: UUID
    title: str
    slug: str
    author: str
    excerpt: str
    content: str
    status: str
    views: int
    thumbnail: dict | None = None
    images: list = []
    created_at: datetime
    updated_at: datetime


class CommentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    comment: str = Field(min_length=1, max_length=5000)


class CommentOut(OrmModel):
    id: UUID
    blog_id: UUID
    name: str
    comment: str
    country: str | None = None
    created_at: datetime


class TestimonialCreate(BaseModel):
    fullname: str = Field(min_length=1, max_length=200)
    occupation: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1, max_length=5000)
    captcha_token: str | None = None


class TestimonialOut(OrmModel):
    id: UUID
    fullname: str
    occupation: str
    message: str
    country: str | None = None
    created_at: datetime


class ContactCreate(BaseModel):
    firstname: str = Field(min_length=1, max_length=100)
    lastname: str = Field(min_length=1, max_length=100)
    email: EmailStr
    number: str | None = Field(None, max_length=40)
    message: str = Field(min_length=1, max_length=5000)
    captcha_token: str | None = None


class ContactOut(OrmModel):
    id: UUID
    firstname: str
    lastname: str
    email: str
    number: str | None = None
    message: str
    country: str | None = None
    created_at: datetime


class NewsletterCreate(BaseModel):
    email: EmailStr


class NewsletterOut(OrmModel):
    id: UUID
    email: str
    created_at: datetime


class ProjectOut(OrmModel):
    id: UUID
    name: str
    category: str
    date: str
    client: str
    description: str
    type: str
    images: list = []
    created_at: datetime
