"""Payment Schemas — subscription and advert payment claims, transactions, subscriptions.

Invariants:
    - Every field of a subscription payment claim is required (missing → 400)
    - Claimed values are never trusted: services reconcile them against the gateway
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from app.core.domain_types import SubscriptionPlan
from app.schemas.common import OrmModel


class SubscriptionPaymentRequest(BaseModel):
    transaction_id: str = Field(min_length=1, max_length=100)
    amount: float = Field(gt=0)
    currency: str = Field(min_length=3, max_length=10)
    email: EmailStr
    plan: SubscriptionPlan
    reference: str = Field(min_length=1, max_length=100)
    status: str = Field(min_length=1, max_length=20)


class AdvertPaymentRequest(BaseModel):
    transaction_id: str = Field(min_length=1, max_length=100)
    plan: str = Field(min_length=1, max_length=50)
    email: EmailStr


class TransactionOut(OrmModel):
    id: UUID
    user_id: UUID | None = None
    transaction_id: str
    reference: str
    amount: float
    currency: str
    status: str
    plan: str
    created_at: datetime


class SubscriptionOut(OrmModel):
    id: UUID
    user_id: UUID | None = None
    transaction_id: UUID | None = None
    reference: str
    plan: str
    status: str
    start_date: datetime
    expiry_date: datetime
    reminder_sent_at: datetime | None = None
    created_at: datetime
