"""Request Dependencies — session-token auth, role gates, cookies and client IP.

Invariants:
    - Token read from the auth cookie first, then an `Authorization: Bearer` header
    - get_current_user rejects missing/expired/invalid tokens and unknown users (401)
      and suspended or banned accounts (403)
    - get_optional_user never raises for a bad token: the caller is treated as anonymous
    - Session cookie is HttpOnly and one day long; SameSite=None + Secure in production, Lax elsewhere
"""

import logging
from uuid import UUID

from fastapi import Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.core.domain_types import UserRole
from app.core.errors import AuthenticationError, ErrorContext, PermissionDeniedError
from app.core.security import decode_session_token
from app.infrastructure.database import get_db
from app.models.user import User
from app.services.auth import check_account_active

logger = logging.getLogger(__name__)


def _extract_token(request: Request, settings: Settings) -> str | None:
    token = request.cookies.get(settings.auth_cookie_name)
    if token:
        return token
    header = request.headers.get("authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None


async def _resolve_user(db: AsyncSession, token: str, settings: Settings) -> User:
    payload = decode_session_token(
        token, secret=settings.jwt_secret, algorithm=settings.jwt_algorithm,
    )
    try:
        user_id = UUID(payload.user_id)
    except ValueError:
        raise AuthenticationError("Invalid session token")
    user = await db.get(User, user_id)
    if user is None:
        raise AuthenticationError(
            "Account no longer exists", context=ErrorContext(user_id=payload.user_id),
        )
    return user


async def get_current_user(
    request: Request, db: AsyncSession = Depends(get_db),
) -> User:
    settings = get_settings()
    token = _extract_token(request, settings)
    if not token:
        raise AuthenticationError("Authentication required")
    user = await _resolve_user(db, token, settings)
    check_account_active(user)
    return user


async def get_optional_user(
    request: Request, db: AsyncSession = Depends(get_db),
) -> User | None:
    settings = get_settings()
    token = _extract_token(request, settings)
    if not token:
        return None
    try:
        user = await _resolve_user(db, token, settings)
    except AuthenticationError as e:
        logger.info(f"Ignoring invalid session on optional-auth route: {e.message}")
        return None
    return user


def require_roles(*roles: UserRole):
    """Dependency factory: the current user must hold one of roles."""
    allowed = {r.value for r in roles}

    async def _check(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise PermissionDeniedError(
                "You do not have permission to access this resource.",
                context=ErrorContext(user_id=str(user.id)),
            )
        return user

    return _check


require_admin = require_roles(UserRole.ADMIN)
require_staff = require_roles(UserRole.AGENT, UserRole.ADMIN)


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        settings.auth_cookie_name,
        token,
        max_age=settings.jwt_expiry_hours * 3600,
        httponly=True,
        secure=settings.is_production,
        samesite="none" if settings.is_production else "lax",
        path="/",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        settings.auth_cookie_name,
        httponly=True,
        secure=settings.is_production,
        samesite="none" if settings.is_production else "lax",
        path="/",
    )


def client_ip(request: Request) -> str | None:
    """First X-Forwarded-For hop (reverse proxy), else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None
