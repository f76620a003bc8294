"""Order ORM — a paid storefront checkout.

Invariants:
    - items hold name/image/price snapshots taken at checkout
    - payment fields written only after Paystack verification succeeds
    - amount is the verified amount in major units; total is the server-computed price
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, String, JSON
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base, TimestampMixin


class Order(TimestampMixin, Base):
    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True, index=True,
    )
    items: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    delivery_details: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    coupon_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    discount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total: Mapped[float] = mapped_column(Float, nullable=False)

    payment_transaction_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    payment_reference: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    payment_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending",
    )
    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    currency: Mapped[str] = mapped_column(String(10), nullable=False, default="NGN")
    payment_method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    order_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="processing",
    )
