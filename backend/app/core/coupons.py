"""Coupon Rules — validity checks and discount arithmetic.

Invariants:
    - Checks run in order: used, expired
    - Discount = total * pct / 100, rounded to 2 decimals; new total never negative
"""

from dataclasses import dataclass
from datetime import datetime

from app.core.datetimes import as_utc
from app.core.errors import BusinessRuleError


@dataclass(frozen=True)
class CouponQuote:
    discount: float
    new_total: float


def check_coupon_usable(is_used: bool, expiry_date: datetime, now: datetime) -> None:
    if is_used:
        raise BusinessRuleError("Coupon has already been used", "COUPON_USED")
    if as_utc(now) > as_utc(expiry_date):
        raise BusinessRuleError("Coupon has expired", "COUPON_EXPIRED")


def apply_discount(order_total: float, discount_percentage: int) -> CouponQuote:
    discount = round(order_total * discount_percentage / 100, 2)
    return CouponQuote(
        discount=discount, new_total=max(round(order_total - discount, 2), 0.0),
    )
