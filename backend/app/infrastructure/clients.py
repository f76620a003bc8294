"""External Clients — one container for every third-party adapter, built once per process.

Invariants:
    - Built in the lifespan and stored on app.state.clients
    - Routes reach adapters only through the get_clients dependency
    - aclose() releases every pooled HTTP connection exactly once

Design Decisions:
    - Container over module-level singletons: tests swap the whole set with fakes
"""

import logging
from dataclasses import dataclass, field

from fastapi import Request

from app.config import Settings
from app.core.repository_protocols import (
    CaptchaVerifier, FlutterwaveGateway, GeoLocator, MailSender,
    MediaStorage, PaystackGateway,
)
from app.infrastructure.http_client import ResilientHttpClient
from app.infrastructure.mailer import build_mail_sender
from app.infrastructure.media_storage import CloudinaryStorage
from app.infrastructure.payment_gateways import FlutterwaveClient, PaystackClient
from app.infrastructure.visitor_checks import IpGeoLocator, RecaptchaVerifier

logger = logging.getLogger(__name__)


@dataclass
class ExternalClients:
    flutterwave: FlutterwaveGateway
    paystack: PaystackGateway
    captcha: CaptchaVerifier
    geo: GeoLocator
    media: MediaStorage
    mail: MailSender
    zoho_accounts: ResilientHttpClient | None = None
    http_clients: list[ResilientHttpClient] = field(default_factory=list)

    async def aclose(self) -> None:
        for http in self.http_clients:
            await http.aclose()
        self.http_clients.clear()


def build_clients(settings: Settings) -> ExternalClients:
    """Wire real adapters from settings."""
    http_clients: list[ResilientHttpClient] = []

    def http(service: str, base_url: str = "") -> ResilientHttpClient:
        client = ResilientHttpClient(
            service,
            base_url=base_url,
            timeout_seconds=settings.http_timeout_seconds,
            max_retries=settings.http_max_retries,
            base_delay_ms=settings.http_base_delay_ms,
            max_delay_ms=settings.http_max_delay_ms,
        )
        http_clients.append(client)
        return client

    clients = ExternalClients(
        flutterwave=FlutterwaveClient(
            http("Flutterwave", settings.flutterwave_base_url),
            settings.flutterwave_secret_key,
        ),
        paystack=PaystackClient(
            http("Paystack", settings.paystack_base_url),
            settings.paystack_secret_key,
        ),
        captcha=RecaptchaVerifier(
            http("reCAPTCHA"),
            settings.recaptcha_secret_key,
            enabled=settings.recaptcha_enabled,
        ),
        geo=IpGeoLocator(http("GeoLookup"), settings.geo_lookup_url),
        media=CloudinaryStorage(
            settings.cloudinary_cloud_name,
            settings.cloudinary_api_key,
            settings.cloudinary_api_secret,
            settings.cloudinary_folder,
        ),
        mail=build_mail_sender(settings, http),
        zoho_accounts=http("Zoho", settings.zoho_accounts_url),
        http_clients=http_clients,
    )
    logger.info(f"External clients ready (mail backend: {settings.mail_backend})")
    return clients


def get_clients(request: Request) -> ExternalClients:
    """FastAPI dependency for the external client container."""
    return request.app.state.clients
