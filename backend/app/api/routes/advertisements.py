"""Advertisement Routes — public submissions, live slots, admin moderation and advert payments.

Invariants:
    - Submission is multipart (image file plus fields); captcha checked first
    - /live is public and returns only active adverts
"""

from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import client_ip, require_admin
from app.core.domain_types import AdType, AdvertisementStatus
from app.infrastructure.clients import ExternalClients, get_clients
from app.infrastructure.database import get_db
from app.models.advertisement import Advertisement
from app.models.user import User
from app.schemas.advertisement import AdvertisementOut, AdvertStatusUpdate
from app.schemas.common import dump
from app.schemas.payment import AdvertPaymentRequest, TransactionOut
from app.services import advertisements as advert_service

router = APIRouter(prefix="/api/v1/advertisements", tags=["advertisements"])


async def _all_adverts(db: AsyncSession) -> list[dict]:
    result = await db.execute(
        select(Advertisement).order_by(Advertisement.created_at.desc())
    )
    return dump(AdvertisementOut, list(result.scalars()))


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_advertisement(
    request: Request,
    fullname: str = Form(..., min_length=1, max_length=200),
    company: str = Form(..., min_length=1, max_length=200),
    email: str = Form(..., min_length=3, max_length=255),
    number: str = Form(..., min_length=1, max_length=40),
    link: str = Form(..., min_length=1, max_length=500),
    information: str = Form(..., min_length=1, max_length=5000),
    ad_type: AdType = Form(...),
    captcha_token: str | None = Form(None),
    image: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    advert = await advert_service.submit_advertisement(
        db,
        captcha=clients.captcha,
        geo=clients.geo,
        media=clients.media,
        mail=clients.mail,
        fields={
            "fullname": fullname,
            "company": company,
            "email": email,
            "number": number,
            "link": link,
            "information": information,
        },
        ad_type=ad_type,
        image=await image.read(),
        captcha_token=captcha_token,
        client_ip=client_ip(request),
    )
    return {
        "message": "Advertisement submitted successfully",
        "advertisement": dump(AdvertisementOut, advert),
    }


@router.get("")
async def list_advertisements(
    admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db),
):
    return {"message": "Advertisements fetched", "advertisements": await _all_adverts(db)}


@router.get("/live")
async def live_advertisements(
    ad_type: AdType | None = None, db: AsyncSession = Depends(get_db),
):
    query = (
        select(Advertisement)
        .where(Advertisement.status == AdvertisementStatus.ACTIVE.value)
        .order_by(Advertisement.position.asc(), Advertisement.start_date.desc())
    )
    if ad_type is not None:
        query = query.where(Advertisement.ad_type == ad_type.value)
    result = await db.execute(query)
    return {
        "message": "Advertisements fetched",
        "advertisements": dump(AdvertisementOut, list(result.scalars())),
    }


@router.put("/{advert_id}/status")
async def update_status(
    advert_id: UUID,
    body: AdvertStatusUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    advert = await advert_service.update_advertisement_status(db, advert_id, body)
    return {
        "message": "Advertisement status updated",
        "advertisement": dump(AdvertisementOut, advert),
    }


@router.delete("/{advert_id}")
async def delete_advertisement(
    advert_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    await advert_service.delete_advertisement(db, clients.media, advert_id)
    return {"message": "Advertisement deleted", "advertisements": await _all_adverts(db)}


@router.post("/payments")
async def pay_for_advertisement(
    body: AdvertPaymentRequest,
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    txn = await advert_service.process_advert_payment(db, clients.flutterwave, body)
    return {"message": "Payment verified", "transaction": dump(TransactionOut, txn)}
