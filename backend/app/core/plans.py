"""Subscription Plans & Payment Reconciliation — pure rules, no IO.

Invariants:
    - listing_limit_for_plan returns None for unlimited (Professional)
    - Unknown plans fall back to DEFAULT_LISTING_LIMIT
    - reconcile_payment never trusts the client amount over the gateway amount:
      verified amount must cover the claimed amount in the same currency
    - Gateway status strings compared case-insensitively
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from app.core.domain_types import SubscriptionPlan


DEFAULT_LISTING_LIMIT: int = 1

PLAN_LISTING_LIMITS: dict[SubscriptionPlan, int | None] = {
    SubscriptionPlan.BASIC: 10,
    SubscriptionPlan.PREMIUM: 50,
    SubscriptionPlan.PROFESSIONAL: None,
}

SUCCESS_STATUSES: frozenset[str] = frozenset({"successful", "completed", "success"})


@dataclass(frozen=True)
class PaymentVerification:
    """Gateway reply normalized across Flutterwave and Paystack."""
    status: str
    amount: float
    currency: str
    reference: str | None = None
    channel: str | None = None
    paid_at: str | None = None

    @property
    def succeeded(self) -> bool:
        return is_gateway_success(self.status)


def listing_limit_for_plan(plan: str | None) -> int | None:
    """Listing quota granted by a plan name. None means unlimited."""
    try:
        return PLAN_LISTING_LIMITS[SubscriptionPlan(plan)]
    except ValueError:
        return DEFAULT_LISTING_LIMIT


def subscription_expiry(start: datetime, duration_days: int) -> datetime:
    return start + timedelta(days=duration_days)


def is_gateway_success(status: str | None) -> bool:
    return (status or "").strip().lower() in SUCCESS_STATUSES


def reconcile_payment(
    verification: PaymentVerification,
    expected_amount: float,
    expected_currency: str | None = None,
) -> str | None:
    """Return a mismatch reason, or None when the verified payment covers the claim."""
    if expected_currency and (
        verification.currency or ""
    ).upper() != expected_currency.upper():
        return (
            f"Currency mismatch: paid {verification.currency}, "
            f"expected {expected_currency}"
        )
    # Cent tolerance for float rounding on gateway amounts
    if verification.amount + 0.005 < expected_amount:
        return (
            f"Amount mismatch: paid {verification.amount:.2f}, "
            f"expected {expected_amount:.2f}"
        )
    return None


def has_listing_capacity(total_listings: int, listing_limit: int | None) -> bool:
    if listing_limit is None:
        return True
    return total_listings < listing_limit
