"""Subscription Routes — plan payments and subscription history."""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, require_admin
from app.config import get_settings
from app.infrastructure.clients import ExternalClients, get_clients
from app.infrastructure.database import get_db
from app.models.subscription import Subscription
from app.models.user import User
from app.schemas.common import dump, dump_with
from app.schemas.payment import (
    SubscriptionOut, SubscriptionPaymentRequest, TransactionOut,
)
from app.schemas.user import UserOut, UserSummary
from app.services.subscriptions import process_subscription_payment

router = APIRouter(prefix="/api/v1/subscriptions", tags=["subscriptions"])


@router.post("/payments")
async def pay_for_subscription(
    body: SubscriptionPaymentRequest,
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    grant = await process_subscription_payment(
        db, clients.flutterwave, clients.mail, body, get_settings(),
    )
    return {
        "message": "Payment verified and subscription activated",
        "user": dump(UserOut, grant.user),
        "subscription": dump(SubscriptionOut, grant.subscription),
        "transaction": dump(TransactionOut, grant.transaction),
    }


@router.get("")
async def list_subscriptions(
    admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Subscription, User)
        .outerjoin(User, Subscription.user_id == User.id)
        .order_by(Subscription.created_at.desc())
    )
    return {
        "message": "Subscriptions fetched",
        "subscriptions": dump_with(SubscriptionOut, result.all(), "user", UserSummary),
    }


@router.get("/mine")
async def my_subscriptions(
    user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Subscription)
        .where(Subscription.user_id == user.id)
        .order_by(Subscription.created_at.desc())
    )
    return {
        "message": "Subscriptions fetched",
        "subscriptions": dump(SubscriptionOut, list(result.scalars())),
    }
