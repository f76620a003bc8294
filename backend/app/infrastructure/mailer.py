"""Mail Delivery — templated HTML email over SMTP, the Zoho Mail API, or the console.

Invariants:
    - Every sender exposes send(to=, subject=, html=) and raises ExternalServiceError on failure
    - Templates live in app/templates/email and are rendered with autoescaping on
    - Zoho access tokens are exchanged from the refresh token per send; token values are never logged
    - ConsoleMailSender keeps an in-memory outbox (development and tests)

Design Decisions:
    - Backend chosen by settings.mail_backend: one factory, no branching in services
    - Callers treat mail as best-effort (services/notifications.py); senders still raise
"""

import logging
from dataclasses import dataclass, field
from email.message import EmailMessage

import aiosmtplib
from jinja2 import Environment, PackageLoader, select_autoescape

from app.config import Settings
from app.core.errors import ExternalServiceError
from app.infrastructure.http_client import ResilientHttpClient

logger = logging.getLogger(__name__)

_templates = Environment(
    loader=PackageLoader("app", "templates/email"),
    autoescape=select_autoescape(["html"]),
)


def render_email(template_name: str, **context) -> str:
    """Render an email template from app/templates/email."""
    return _templates.get_template(template_name).render(**context)


class SmtpMailSender:
    """Sends mail through an SMTP relay with aiosmtplib."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        sender: str,
        use_tls: bool = True,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.use_tls = use_tls

    async def send(self, *, to: str, subject: str, html: str) -> None:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This message requires an HTML-capable mail client.")
        message.add_alternative(html, subtype="html")
        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username or None,
                password=self.password or None,
                use_tls=self.use_tls,
            )
        except aiosmtplib.SMTPException as e:
            raise ExternalServiceError("SMTP", str(e))
        logger.info(f"Mail sent: {subject}", extra={"resource": "mail"})


class ZohoMailSender:
    """Sends mail through the Zoho Mail REST API using an OAuth refresh token."""

    def __init__(
        self,
        accounts_http: ResilientHttpClient,
        mail_http: ResilientHttpClient,
        *,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        account_id: str,
        sender: str,
    ):
        self.accounts_http = accounts_http
        self.mail_http = mail_http
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_token = refresh_token
        self.account_id = account_id
        self.sender = sender

    async def _access_token(self) -> str:
        data = await self.accounts_http.post_json(
            "/oauth/v2/token",
            params={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": self.refresh_token,
                "grant_type": "refresh_token",
            },
        )
        token = data.get("access_token")
        if not token:
            raise ExternalServiceError("Zoho", "refresh token exchange failed")
        return token

    async def send(self, *, to: str, subject: str, html: str) -> None:
        token = await self._access_token()
        await self.mail_http.post_json(
            f"/api/accounts/{self.account_id}/messages",
            json={
                "fromAddress": self.sender,
                "toAddress": to,
                "subject": subject,
                "content": html,
                "mailFormat": "html",
            },
            headers={"Authorization": f"Zoho-oauthtoken {token}"},
        )
        logger.info(f"Mail sent: {subject}", extra={"resource": "mail"})


async def exchange_authorization_code(
    accounts_http: ResilientHttpClient,
    *,
    client_id: str,
    client_secret: str,
    redirect_uri: str,
    code: str,
) -> dict:
    """Trade a Zoho authorization code for tokens (one-off OAuth setup)."""
    return await accounts_http.post_json(
        "/oauth/v2/token",
        params={
            "client_id": client_id,
            "client_secret": client_secret,
            "grant_type": "authorization_code",
            "redirect_uri": redirect_uri,
            "code": code,
        },
    )


@dataclass
class SentMail:
    to: str
    subject: str
    html: str


@dataclass
class ConsoleMailSender:
    """Logs mail instead of sending it."""

    outbox: list[SentMail] = field(default_factory=list)

    async def send(self, *, to: str, subject: str, html: str) -> None:
        self.outbox.append(SentMail(to=to, subject=subject, html=html))
        logger.info(f"Console mail to {to}: {subject}", extra={"resource": "mail"})


def build_mail_sender(settings: Settings, http_factory) -> object:
    """Build the configured MailSender.

    http_factory(service, base_url) returns a ResilientHttpClient; the caller
    owns the clients it creates.
    """
    sender = f"{settings.mail_from_name} <{settings.mail_from_address}>"
    backend = settings.mail_backend.lower()
    if backend == "smtp":
        return SmtpMailSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            sender=sender,
            use_tls=settings.smtp_use_tls,
        )
    if backend == "zoho":
        return ZohoMailSender(
            http_factory("Zoho", settings.zoho_accounts_url),
            http_factory("Zoho", settings.zoho_mail_url),
            client_id=settings.zoho_client_id,
            client_secret=settings.zoho_client_secret,
            refresh_token=settings.zoho_refresh_token,
            account_id=settings.zoho_account_id,
            sender=sender,
        )
    if backend != "console":
        logger.warning(f"Unknown mail backend '{backend}', using console")
    return ConsoleMailSender()
