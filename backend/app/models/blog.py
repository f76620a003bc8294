"""Blog ORM — CMS posts addressed by slug.

Invariants:
    - slug unique, derived from title at creation
    - thumbnail {url, public_id}; images list of the same shape
    - comments deleted with the post (ON DELETE CASCADE)
"""

import uuid

from sqlalchemy import Integer, String, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base, TimestampMixin


class Blog(TimestampMixin, Base):
    __tablename__ = "blogs"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    slug: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    author: Mapped[str] = mapped_column(String(200), nullable=False)
    excerpt: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    thumbnail: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
