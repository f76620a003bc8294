"""Testimonial Routes — captcha-guarded submissions and the public wall."""

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import client_ip
from app.core.domain_types import TimestampType
from app.core.errors import CaptchaVerificationError
from app.infrastructure.clients import ExternalClients, get_clients
from app.infrastructure.database import get_db
from app.models.testimonial import Testimonial
from app.schemas.common import dump
from app.schemas.content import TestimonialCreate, TestimonialOut
from app.services.timestamps import touch

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/testimonials", tags=["testimonials"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_testimonial(
    body: TestimonialCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    ip = client_ip(request)
    if not await clients.captcha.verify(body.captcha_token, ip):
        raise CaptchaVerificationError()
    testimonial = Testimonial(
        fullname=body.fullname,
        occupation=body.occupation,
        message=body.message,
        country=await clients.geo.country_for(ip),
    )
    db.add(testimonial)
    await touch(db, TimestampType.TESTIMONIAL)
    await db.commit()
    await db.refresh(testimonial)
    logger.info("Testimonial submitted")
    return {"message": "Thank you for your testimonial", "testimonial": dump(TestimonialOut, testimonial)}


@router.get("")
async def list_testimonials(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Testimonial).order_by(Testimonial.created_at.desc()))
    return {"message": "Testimonials fetched", "testimonials": dump(TestimonialOut, list(result.scalars()))}
