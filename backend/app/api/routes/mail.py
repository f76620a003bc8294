"""Mail OAuth Callback — one-off Zoho authorization code exchange.

Invariants:
    - Token values are never logged or returned; only whether a refresh token arrived
"""

import logging

from fastapi import APIRouter, Depends

from app.config import get_settings
from app.core.errors import ExternalServiceError, InvalidInputError
from app.infrastructure.clients import ExternalClients, get_clients
from app.infrastructure.mailer import exchange_authorization_code

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/mail", tags=["mail"])


@router.get("/callback")
async def oauth_callback(
    code: str | None = None, clients: ExternalClients = Depends(get_clients),
):
    if not code:
        raise InvalidInputError("Authorization code is required.", field="code")
    if clients.zoho_accounts is None:
        raise ExternalServiceError("Zoho", "accounts client not configured")

    settings = get_settings()
    tokens = await exchange_authorization_code(
        clients.zoho_accounts,
        client_id=settings.zoho_client_id,
        client_secret=settings.zoho_client_secret,
        redirect_uri=settings.zoho_redirect_uri,
        code=code,
    )
    received = bool(tokens.get("refresh_token"))
    logger.info(f"Zoho authorization exchanged (refresh token received: {received})")
    return {"message": "Authorization complete", "refresh_token_received": received}
