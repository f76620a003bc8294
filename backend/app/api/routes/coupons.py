"""Coupon Routes — admin issuance and checkout validation."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.core.errors import ConflictError
from app.infrastructure.database import get_db
from app.models.coupon import Coupon
from app.models.user import User
from app.schemas.common import dump
from app.schemas.storefront import CouponCreate, CouponOut, CouponValidate
from app.services.orders import quote_coupon

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/coupons", tags=["coupons"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_coupon(
    body: CouponCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    existing = await db.execute(select(Coupon.id).where(Coupon.code == body.code))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(f"Coupon {body.code} already exists.")
    coupon = Coupon(
        code=body.code,
        discount_percentage=body.discount_percentage,
        expiry_date=body.expiry_date,
    )
    db.add(coupon)
    await db.commit()
    await db.refresh(coupon)
    logger.info(f"Coupon created: {coupon.code}")
    return {"message": "Coupon created successfully", "coupon": dump(CouponOut, coupon)}


@router.post("/validate")
async def validate_coupon(body: CouponValidate, db: AsyncSession = Depends(get_db)):
    quote = await quote_coupon(db, body.code, body.order_total)
    return {
        "message": "Coupon applied",
        "discount": quote.discount,
        "new_total": quote.new_total,
    }
