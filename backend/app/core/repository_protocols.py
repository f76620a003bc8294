"""Boundary Protocols — contracts between services and the IO adapters they call.

Invariants:
    - Services depend on these Protocols, never on concrete SDK clients
    - Implementations live in infrastructure/ and are built once in the lifespan
    - Test fakes satisfy the same Protocols structurally

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
"""

from typing import Protocol

from app.core.plans import PaymentVerification


class MediaStorage(Protocol):
    """Third-party media host (Cloudinary in production)."""
    async def upload(self, data: bytes, folder: str | None = None) -> dict: ...
    async def destroy(self, public_id: str) -> None: ...


class MailSender(Protocol):
    """Outbound transactional email."""
    async def send(self, *, to: str, subject: str, html: str) -> None: ...


class FlutterwaveGateway(Protocol):
    async def verify(self, transaction_id: str) -> PaymentVerification: ...


class PaystackGateway(Protocol):
    async def verify(self, reference: str) -> PaymentVerification: ...


class CaptchaVerifier(Protocol):
    async def verify(self, token: str | None, remote_ip: str | None = None) -> bool: ...


class GeoLocator(Protocol):
    async def country_for(self, ip: str | None) -> str: ...
