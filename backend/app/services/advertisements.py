"""Advertisement Flows — submission, admin status changes and advert payments.

Invariants:
    - Captcha checked before any upload or write
    - Activating sets start_date = now; duration_days sets expiry_date = start_date + days
    - Any non-active status clears position
    - Advert payments change state only after Flutterwave reports success
"""

import logging
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.datetimes import utc_now
from app.core.domain_types import AdType, AdvertisementStatus, TimestampType
from app.core.errors import (
    CaptchaVerificationError, ErrorContext, PaymentVerificationError,
)
from app.core.repository_protocols import (
    CaptchaVerifier, FlutterwaveGateway, GeoLocator, MailSender, MediaStorage,
)
from app.models.advertisement import Advertisement
from app.models.transaction import Transaction
from app.schemas.advertisement import AdvertStatusUpdate
from app.schemas.payment import AdvertPaymentRequest
from app.services.auth import find_user_by_email
from app.services.lookups import get_or_404
from app.services.media_cleanup import destroy_quietly
from app.services.notifications import notify
from app.services.timestamps import touch

logger = logging.getLogger(__name__)


async def submit_advertisement(
    db: AsyncSession,
    *,
    captcha: CaptchaVerifier,
    geo: GeoLocator,
    media: MediaStorage,
    mail: MailSender,
    fields: dict,
    ad_type: AdType,
    image: bytes,
    captcha_token: str | None,
    client_ip: str | None,
) -> Advertisement:
    if not await captcha.verify(captcha_token, client_ip):
        raise CaptchaVerificationError()

    uploaded = await media.upload(image, folder="advertisements")
    country = await geo.country_for(client_ip)
    now = utc_now()
    advert = Advertisement(
        **dict(fields, email=fields["email"].strip().lower()),
        ad_type=ad_type.value,
        image=uploaded,
        country=country,
        status=AdvertisementStatus.PENDING.value,
        start_date=now,
        expiry_date=now,
    )
    db.add(advert)
    await touch(db, TimestampType.ADVERTISEMENT)
    await db.commit()
    await db.refresh(advert)
    logger.info("Advertisement submitted", extra={"resource": str(advert.id)})

    await notify(
        mail, to=advert.email, subject="We received your advert",
        template="advert_submitted.html",
        fullname=advert.fullname, ad_type=advert.ad_type,
    )
    return advert


async def update_advertisement_status(
    db: AsyncSession, advert_id, body: AdvertStatusUpdate,
) -> Advertisement:
    advert = await get_or_404(db, Advertisement, advert_id, "Advertisement")
    if body.status is AdvertisementStatus.ACTIVE:
        advert.start_date = utc_now()
        if body.position is not None:
            advert.position = body.position
    else:
        advert.position = None
    if body.duration_days is not None:
        advert.expiry_date = advert.start_date + timedelta(days=body.duration_days)
    advert.status = body.status.value
    await touch(db, TimestampType.ADVERTISEMENT)
    await db.commit()
    await db.refresh(advert)
    logger.info(f"Advertisement {body.status.value}", extra={"resource": str(advert.id)})
    return advert


async def delete_advertisement(
    db: AsyncSession, media: MediaStorage, advert_id,
) -> None:
    advert = await get_or_404(db, Advertisement, advert_id, "Advertisement")
    public_id = (advert.image or {}).get("public_id")
    await db.delete(advert)
    await touch(db, TimestampType.ADVERTISEMENT)
    await db.commit()
    await destroy_quietly(media, public_id)
    logger.info("Advertisement deleted", extra={"resource": str(advert_id)})


async def process_advert_payment(
    db: AsyncSession, gateway: FlutterwaveGateway, body: AdvertPaymentRequest,
) -> Transaction:
    verification = await gateway.verify(body.transaction_id)
    if not verification.succeeded:
        raise PaymentVerificationError(
            "Payment verification failed",
            reference=body.transaction_id,
            context=ErrorContext(reference=body.transaction_id),
        )

    result = await db.execute(
        select(Transaction).where(Transaction.transaction_id == body.transaction_id)
    )
    txn = result.scalar_one_or_none()
    if txn is None:
        txn = Transaction(transaction_id=body.transaction_id)
        db.add(txn)
    txn.amount = verification.amount
    txn.currency = verification.currency.upper()
    txn.status = verification.status.lower()
    txn.reference = verification.reference or body.transaction_id
    txn.plan = body.plan
    user = await find_user_by_email(db, body.email)
    if user is not None:
        txn.user_id = user.id
    await touch(db, TimestampType.TRANSACTION)
    await db.commit()
    await db.refresh(txn)
    logger.info(
        f"Advert payment verified: {body.plan}", extra={"reference": txn.reference},
    )
    return txn
