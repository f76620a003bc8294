"""Subscription Payments — verify a Flutterwave payment, then grant the plan.

Invariants:
    - The client-reported transaction is recorded before verification (audit trail)
    - No subscription or user change happens unless the gateway reports success AND the
      verified amount/currency cover the claim
    - A reconciliation mismatch marks the transaction failed
    - After success the user holds exactly one Active subscription

Design Decisions:
    - Transaction upserted by reference: retried callbacks for the same payment reuse the row
    - The failed-state commit happens before raising, so the 400 still leaves the audit row
"""

import logging
from dataclasses import dataclass

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.core.datetimes import utc_now
from app.core.domain_types import (
    SubscriptionStatus, TimestampType, TransactionStatus,
)
from app.core.errors import (
    ErrorContext, PaymentVerificationError, ResourceNotFoundError,
)
from app.core.plans import (
    listing_limit_for_plan, reconcile_payment, subscription_expiry,
)
from app.core.repository_protocols import FlutterwaveGateway, MailSender
from app.models.subscription import Subscription
from app.models.transaction import Transaction
from app.models.user import User
from app.schemas.payment import SubscriptionPaymentRequest
from app.services.auth import find_user_by_email
from app.services.notifications import notify
from app.services.timestamps import touch

logger = logging.getLogger(__name__)


@dataclass
class SubscriptionGrant:
    user: User
    subscription: Subscription
    transaction: Transaction


async def _upsert_claimed_transaction(
    db: AsyncSession, user: User, body: SubscriptionPaymentRequest,
) -> Transaction:
    result = await db.execute(
        select(Transaction).where(Transaction.reference == body.reference)
    )
    txn = result.scalars().first()
    if txn is None:
        txn = Transaction(reference=body.reference)
        db.add(txn)
    txn.user_id = user.id
    txn.transaction_id = body.transaction_id
    txn.amount = body.amount
    txn.currency = body.currency.upper()
    txn.status = body.status.lower()
    txn.plan = body.plan.value
    await touch(db, TimestampType.TRANSACTION)
    await db.commit()
    return txn


async def process_subscription_payment(
    db: AsyncSession,
    gateway: FlutterwaveGateway,
    mail: MailSender,
    body: SubscriptionPaymentRequest,
    settings: Settings,
) -> SubscriptionGrant:
    user = await find_user_by_email(db, body.email)
    if user is None:
        raise ResourceNotFoundError("User", body.email)
    ctx = ErrorContext(user_id=str(user.id), reference=body.reference)

    txn = await _upsert_claimed_transaction(db, user, body)
    verification = await gateway.verify(body.transaction_id)

    if not verification.succeeded:
        txn.status = verification.status.lower() or TransactionStatus.FAILED.value
        await touch(db, TimestampType.TRANSACTION)
        await db.commit()
        logger.warning(
            f"Gateway reported '{verification.status}'", extra={"reference": body.reference},
        )
        raise PaymentVerificationError(
            "Payment failed during verification", reference=body.reference, context=ctx,
        )

    mismatch = reconcile_payment(verification, body.amount, body.currency)
    if mismatch:
        txn.status = TransactionStatus.FAILED.value
        await touch(db, TimestampType.TRANSACTION)
        await db.commit()
        logger.warning(mismatch, extra={"reference": body.reference})
        raise PaymentVerificationError(
            f"Payment verification failed. {mismatch}",
            reference=body.reference, context=ctx,
        )

    now = utc_now()
    txn.status = verification.status.lower()
    txn.amount = verification.amount
    txn.currency = verification.currency.upper()

    await db.execute(
        update(Subscription)
        .where(Subscription.user_id == user.id)
        .where(Subscription.status == SubscriptionStatus.ACTIVE.value)
        .values(status=SubscriptionStatus.EXPIRED.value)
    )
    subscription = Subscription(
        user_id=user.id,
        transaction_id=txn.id,
        reference=body.reference,
        plan=body.plan.value,
        status=SubscriptionStatus.ACTIVE.value,
        start_date=now,
        expiry_date=subscription_expiry(now, settings.subscription_duration_days),
    )
    db.add(subscription)
    await db.flush()

    user.subscription_id = subscription.id
    user.subscribed = True
    user.plan = body.plan.value
    user.listing_limit = listing_limit_for_plan(body.plan.value)
    await touch(
        db, TimestampType.USER, TimestampType.SUBSCRIPTION, TimestampType.TRANSACTION,
    )
    await db.commit()
    logger.info(
        f"Subscription activated: {body.plan.value}",
        extra={"user_id": str(user.id), "reference": body.reference},
    )

    await notify(
        mail, to=user.email, subject="Your subscription is active",
        template="payment_success.html",
        firstname=user.firstname, plan=subscription.plan,
        amount=verification.amount, currency=txn.currency,
        expiry_date=subscription.expiry_date.strftime("%d %B %Y"),
        listing_limit=user.listing_limit, reference=body.reference,
    )
    return SubscriptionGrant(user=user, subscription=subscription, transaction=txn)
