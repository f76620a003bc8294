"""Payment Gateways — server-side verification against Flutterwave and Paystack.

Invariants:
    - verify() never mutates local state; it only reports what the gateway says
    - Replies normalized to PaymentVerification (amount in major currency units)
    - Paystack amounts arrive in kobo and are divided by 100
    - Malformed gateway replies raise PaymentVerificationError, transport failures
      raise ExternalServiceError (via ResilientHttpClient)
"""

import logging

from app.core.errors import PaymentVerificationError
from app.core.plans import PaymentVerification
from app.infrastructure.http_client import ResilientHttpClient

logger = logging.getLogger(__name__)


class FlutterwaveClient:
    """Verifies Flutterwave transactions by numeric transaction id."""

    def __init__(self, http: ResilientHttpClient, secret_key: str):
        self.http = http
        self._headers = {"Authorization": f"Bearer {secret_key}"}

    async def verify(self, transaction_id: str) -> PaymentVerification:
        payload = await self.http.get_json(
            f"/transactions/{transaction_id}/verify", headers=self._headers,
        )
        data = payload.get("data")
        if payload.get("status") != "success" or not isinstance(data, dict):
            logger.warning(
                "Flutterwave verification returned no data",
                extra={"reference": transaction_id},
            )
            raise PaymentVerificationError(
                "Payment verification failed. Invalid response from Flutterwave.",
                reference=transaction_id,
            )
        return PaymentVerification(
            status=str(data.get("status", "failed")),
            amount=float(data.get("amount") or 0),
            currency=str(data.get("currency") or ""),
            reference=data.get("tx_ref"),
            channel=data.get("payment_type"),
            paid_at=data.get("created_at"),
        )


class PaystackClient:
    """Verifies Paystack transactions by reference."""

    def __init__(self, http: ResilientHttpClient, secret_key: str):
        self.http = http
        self._headers = {
            "Authorization": f"Bearer {secret_key}",
            "Content-Type": "application/json",
        }

    async def verify(self, reference: str) -> PaymentVerification:
        payload = await self.http.get_json(
            f"/transaction/verify/{reference}", headers=self._headers,
        )
        data = payload.get("data")
        if not payload.get("status") or not isinstance(data, dict):
            logger.warning(
                "Paystack verification returned no data",
                extra={"reference": reference},
            )
            raise PaymentVerificationError(
                "Payment verification failed. Invalid response from Paystack.",
                reference=reference,
            )
        return PaymentVerification(
            status=str(data.get("status", "failed")),
            amount=float(data.get("amount") or 0) / 100,
            currency=str(data.get("currency") or ""),
            reference=data.get("reference", reference),
            channel=data.get("channel"),
            paid_at=data.get("paid_at"),
        )
