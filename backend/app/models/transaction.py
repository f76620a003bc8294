"""Transaction ORM — a gateway payment as reported by the client, then as verified.

Invariants:
    - transaction_id (gateway id) is unique
    - status starts as the client-reported value and is overwritten by the verified one
    - amount/currency overwritten with verified values only after reconciliation
"""

import uuid

from sqlalchemy import Float, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base, TimestampMixin


class Transaction(TimestampMixin, Base):
    __tablename__ = "transactions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True, index=True,
    )
    transaction_id: Mapped[str] = mapped_column(
        String(100), nullable=False, unique=True,
    )
    reference: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    currency: Mapped[str] = mapped_column(String(10), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    plan: Mapped[str] = mapped_column(String(50), nullable=False)
