"""Newsletter Routes — subscriptions with a welcome mail and an admin notice.

Invariants:
    - One subscription per email (409)
    - Both mails are best-effort; the subscription stands if either fails
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.config import get_settings
from app.core.domain_types import TimestampType
from app.core.errors import ConflictError
from app.infrastructure.clients import ExternalClients, get_clients
from app.infrastructure.database import get_db
from app.models.newsletter import NewsletterSubscriber
from app.models.user import User
from app.schemas.common import dump
from app.schemas.content import NewsletterCreate, NewsletterOut
from app.services.notifications import notify
from app.services.timestamps import touch

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/newsletter", tags=["newsletter"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def subscribe(
    body: NewsletterCreate,
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    email = body.email.lower()
    existing = await db.execute(
        select(NewsletterSubscriber.id).where(NewsletterSubscriber.email == email)
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("This email is already subscribed.")

    subscriber = NewsletterSubscriber(email=email)
    db.add(subscriber)
    await touch(db, TimestampType.NEWSLETTER)
    await db.commit()
    await db.refresh(subscriber)
    logger.info("Newsletter subscription added")

    await notify(
        clients.mail, to=email, subject="Welcome to the HouseHunter newsletter",
        template="newsletter_welcome.html",
    )
    await notify(
        clients.mail, to=get_settings().admin_notification_email,
        subject="New newsletter subscriber",
        template="admin_newsletter_notice.html", email=email,
    )
    return {"message": "Subscribed successfully", "subscriber": dump(NewsletterOut, subscriber)}


@router.get("")
async def list_subscribers(
    admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(NewsletterSubscriber).order_by(NewsletterSubscriber.created_at.desc())
    )
    return {"message": "Subscribers fetched", "subscribers": dump(NewsletterOut, list(result.scalars()))}
