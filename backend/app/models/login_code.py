"""LoginCode ORM — one-time 6-digit codes for passwordless login, password reset and email change.

Invariants:
    - At most one code per email (issuing a new one replaces the old row)
    - Consumed codes are deleted; expired codes are deleted when presented
    - failed_attempts counts wrong guesses; the row is deleted once it reaches
      LOGIN_CODE_MAX_ATTEMPTS (core/security.py)
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base, TimestampMixin


class LoginCode(TimestampMixin, Base):
    __tablename__ = "login_codes"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    code: Mapped[str] = mapped_column(String(10), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    failed_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
