"""Storefront Orders — coupon quotes, Paystack-verified checkout and order status changes.

Invariants:
    - The order total is computed from current product sale prices, never from the client
    - An order is stored only after Paystack verifies the reference and the paid amount
      covers the total (after coupon)
    - A coupon is marked used in the same transaction that stores the order
    - Owners may only cancel, and only while the order is processing; Admins may set any status
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.coupons import CouponQuote, apply_discount, check_coupon_usable
from app.core.datetimes import utc_now
from app.core.domain_types import (
    OrderStatus, PaymentStatus, ProductStatus, TimestampType, UserRole,
)
from app.core.errors import (
    BusinessRuleError, ConflictError, ErrorContext, PaymentVerificationError,
    PermissionDeniedError, ResourceNotFoundError,
)
from app.core.plans import reconcile_payment
from app.core.repository_protocols import PaystackGateway
from app.models.coupon import Coupon
from app.models.order import Order
from app.models.product import Product
from app.models.user import User
from app.schemas.storefront import OrderCreate
from app.services.lookups import get_or_404
from app.services.timestamps import touch

logger = logging.getLogger(__name__)


async def _load_coupon(db: AsyncSession, code: str) -> Coupon:
    result = await db.execute(select(Coupon).where(Coupon.code == code.upper()))
    coupon = result.scalar_one_or_none()
    if coupon is None:
        raise ResourceNotFoundError("Coupon", code)
    return coupon


async def quote_coupon(db: AsyncSession, code: str, order_total: float) -> CouponQuote:
    coupon = await _load_coupon(db, code)
    check_coupon_usable(coupon.is_used, coupon.expiry_date, utc_now())
    return apply_discount(order_total, coupon.discount_percentage)


async def _price_items(db: AsyncSession, body: OrderCreate) -> tuple[list[dict], float]:
    items: list[dict] = []
    total = 0.0
    for line in body.items:
        product = await db.get(Product, line.product_id)
        if product is None:
            raise ResourceNotFoundError("Product", str(line.product_id))
        if product.status != ProductStatus.AVAILABLE.value or not product.in_stock:
            raise BusinessRuleError(
                f"{product.name} is not available.", "PRODUCT_UNAVAILABLE",
            )
        image = (product.images or [{}])[0].get("url", "")
        items.append({
            "product_id": str(product.id),
            "name": product.name,
            "image": image,
            "price": product.sale_price,
            "quantity": line.quantity,
        })
        total += product.sale_price * line.quantity
    return items, round(total, 2)


async def place_order(
    db: AsyncSession,
    gateway: PaystackGateway,
    user: User | None,
    body: OrderCreate,
) -> Order:
    ctx = ErrorContext(
        user_id=str(user.id) if user else None, reference=body.reference,
    )
    existing = await db.execute(
        select(Order.id).where(Order.payment_reference == body.reference)
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("An order already exists for this payment.", context=ctx)

    verification = await gateway.verify(body.reference)
    if not verification.succeeded:
        raise PaymentVerificationError(
            "Payment verification failed", reference=body.reference, context=ctx,
        )

    items, total = await _price_items(db, body)
    discount = 0.0
    coupon = None
    if body.coupon_code:
        coupon = await _load_coupon(db, body.coupon_code)
        check_coupon_usable(coupon.is_used, coupon.expiry_date, utc_now())
        quote = apply_discount(total, coupon.discount_percentage)
        discount, total = quote.discount, quote.new_total

    mismatch = reconcile_payment(verification, total)
    if mismatch:
        logger.warning(mismatch, extra={"reference": body.reference})
        raise PaymentVerificationError(
            f"Payment verification failed. {mismatch}",
            reference=body.reference, context=ctx,
        )

    order = Order(
        user_id=user.id if user else None,
        items=items,
        delivery_details=body.delivery_details.model_dump(mode="json"),
        coupon_code=coupon.code if coupon else None,
        discount=discount,
        total=total,
        payment_transaction_id=body.transaction_id,
        payment_reference=body.reference,
        payment_status=PaymentStatus.SUCCESS.value,
        amount=verification.amount,
        currency=verification.currency.upper() or "NGN",
        payment_method=verification.channel,
        paid_at=utc_now(),
        order_status=OrderStatus.PROCESSING.value,
    )
    db.add(order)
    if coupon is not None:
        coupon.is_used = True
    await touch(db, TimestampType.ORDER)
    await db.commit()
    await db.refresh(order)
    logger.info(
        f"Order placed: {len(items)} items, total {total:.2f}",
        extra={"resource": str(order.id), "reference": body.reference},
    )
    return order


async def update_order_status(
    db: AsyncSession, user: User, order_id: UUID, status: OrderStatus,
) -> Order:
    order = await get_or_404(db, Order, order_id, "Order")
    if user.role != UserRole.ADMIN.value:
        if order.user_id != user.id:
            raise PermissionDeniedError("You can only manage your own orders.")
        if status is not OrderStatus.CANCELLED:
            raise PermissionDeniedError("You can only cancel an order.")
        if order.order_status != OrderStatus.PROCESSING.value:
            raise BusinessRuleError(
                "Only orders that are still processing can be cancelled.",
                "ORDER_NOT_CANCELLABLE",
            )
    order.order_status = status.value
    await touch(db, TimestampType.ORDER, TimestampType.USER)
    await db.commit()
    await db.refresh(order)
    logger.info(
        f"Order status set to {status.value}",
        extra={"user_id": str(user.id), "resource": str(order.id)},
    )
    return order
