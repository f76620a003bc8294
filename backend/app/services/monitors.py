"""Expiry Sweeps — daily subscription and advertisement expiry, plus renewal reminders.

Invariants:
    - Idempotent: a second run at the same instant changes nothing
    - An expired subscription whose owner no longer exists is still marked Expired
    - Owners of expired subscriptions revert to the free tier (no plan, default limit)
    - Each subscription gets at most one reminder (reminder_sent_at); a failed send is retried next run
    - Expired adverts lose their position slot

Design Decisions:
    - Plain async functions taking a session: the scheduler, the admin route and tests
      all call the same code
    - `now` injectable for deterministic tests
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.core.datetimes import as_utc, utc_now
from app.core.domain_types import (
    AdvertisementStatus, SubscriptionStatus, TimestampType,
)
from app.core.repository_protocols import MailSender
from app.models.advertisement import Advertisement
from app.models.subscription import Subscription
from app.models.user import User
from app.services.notifications import notify
from app.services.timestamps import touch

logger = logging.getLogger(__name__)


async def _expire_subscriptions(
    db: AsyncSession, now: datetime, default_limit: int,
) -> int:
    result = await db.execute(
        select(Subscription)
        .where(Subscription.status == SubscriptionStatus.ACTIVE.value)
        .where(Subscription.expiry_date < now)
    )
    expired = list(result.scalars())
    for subscription in expired:
        subscription.status = SubscriptionStatus.EXPIRED.value
        owner = await db.get(User, subscription.user_id) if subscription.user_id else None
        if owner is None:
            logger.warning(
                "Expired subscription has no owner",
                extra={"resource": str(subscription.id), "job": "subscription-expiry"},
            )
            continue
        if owner.subscription_id in (None, subscription.id):
            owner.subscribed = False
            owner.plan = None
            owner.listing_limit = default_limit
            owner.subscription_id = None
    if expired:
        await touch(db, TimestampType.SUBSCRIPTION, TimestampType.USER)
    await db.commit()
    return len(expired)


async def _send_reminders(
    db: AsyncSession, mail: MailSender, now: datetime, window_days: int,
) -> int:
    result = await db.execute(
        select(Subscription, User)
        .join(User, User.id == Subscription.user_id)
        .where(Subscription.status == SubscriptionStatus.ACTIVE.value)
        .where(Subscription.expiry_date >= now)
        .where(Subscription.expiry_date < now + timedelta(days=window_days))
        .where(Subscription.reminder_sent_at.is_(None))
    )
    reminded = 0
    for subscription, owner in result.all():
        sent = await notify(
            mail, to=owner.email, subject="Your subscription is about to expire",
            template="subscription_reminder.html",
            firstname=owner.firstname, plan=subscription.plan,
            expiry_date=as_utc(subscription.expiry_date).strftime("%d %B %Y"),
        )
        if sent:
            subscription.reminder_sent_at = now
            reminded += 1
    await db.commit()
    return reminded


async def sweep_subscriptions(
    db: AsyncSession,
    mail: MailSender,
    settings: Settings,
    now: datetime | None = None,
) -> dict:
    now = now or utc_now()
    expired = await _expire_subscriptions(db, now, settings.default_listing_limit)
    reminded = await _send_reminders(db, mail, now, settings.subscription_reminder_days)
    logger.info(
        f"Subscription sweep: {expired} expired, {reminded} reminded",
        extra={"job": "subscription-expiry", "count": expired},
    )
    return {"expired": expired, "reminded": reminded}


async def sweep_advertisements(
    db: AsyncSession, now: datetime | None = None,
) -> dict:
    now = now or utc_now()
    result = await db.execute(
        select(Advertisement)
        .where(Advertisement.status == AdvertisementStatus.ACTIVE.value)
        .where(Advertisement.expiry_date < now)
    )
    expired = list(result.scalars())
    for advert in expired:
        advert.status = AdvertisementStatus.EXPIRED.value
        advert.position = None
    if expired:
        await touch(db, TimestampType.ADVERTISEMENT)
    await db.commit()
    logger.info(
        f"Advertisement sweep: {len(expired)} expired",
        extra={"job": "advertisement-expiry", "count": len(expired)},
    )
    return {"expired": len(expired)}
