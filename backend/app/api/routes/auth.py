"""Auth Routes — registration, password and code sign-in, password reset, logout.

Invariants:
    - Every successful sign-in sets the session cookie and returns the token
    - Responses never include password hashes (UserOut has no such field)
"""

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import clear_session_cookie, get_current_user, set_session_cookie
from app.config import get_settings
from app.infrastructure.clients import ExternalClients, get_clients
from app.infrastructure.database import get_db
from app.models.user import User
from app.schemas.common import dump
from app.schemas.user import (
    CodeRequest, CodeVerifyRequest, LoginRequest, PasswordResetRequest,
    RegisterRequest, UserOut,
)
from app.services import auth as auth_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _signed_in(response: Response, user: User, message: str) -> dict:
    settings = get_settings()
    token = auth_service.issue_session_token(user, settings)
    set_session_cookie(response, token, settings)
    return {"message": message, "token": token, "user": dump(UserOut, user)}


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    user = await auth_service.register(db, clients.mail, body, get_settings())
    return _signed_in(response, user, "Account created successfully")


@router.post("/login")
async def login(
    body: LoginRequest, response: Response, db: AsyncSession = Depends(get_db),
):
    user = await auth_service.authenticate(db, body.email, body.password)
    return _signed_in(response, user, "Login successful")


@router.post("/code")
async def request_code(
    body: CodeRequest,
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    await auth_service.issue_code(
        db, clients.mail, body.email, get_settings().login_code_ttl_minutes,
    )
    return {"message": "Verification code sent to your email"}


@router.post("/code/verify")
async def verify_code(
    body: CodeVerifyRequest, response: Response, db: AsyncSession = Depends(get_db),
):
    user = await auth_service.login_with_code(db, body.email, body.code)
    return _signed_in(response, user, "Login successful")


@router.post("/password/reset")
async def reset_password(
    body: PasswordResetRequest,
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    await auth_service.reset_password(db, clients.mail, body)
    return {"message": "Password reset successfully"}


@router.post("/logout")
async def logout(response: Response):
    clear_session_cookie(response, get_settings())
    return {"message": "Logged out successfully"}


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    return {"message": "Authenticated", "user": dump(UserOut, user)}
