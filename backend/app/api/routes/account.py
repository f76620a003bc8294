"""Account Routes — self-service settings for the signed-in user."""

import logging

from fastapi import APIRouter, Depends, File, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import clear_session_cookie, get_current_user
from app.config import get_settings
from app.infrastructure.clients import ExternalClients, get_clients
from app.infrastructure.database import get_db
from app.models.user import User
from app.schemas.common import dump
from app.schemas.user import (
    Address, CodeRequest, EmailChangeRequest, NameUpdate, PasswordChange,
    ProfileUpdate, UserOut,
)
from app.services import accounts

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/account", tags=["account"])


@router.post("/email/code")
async def request_email_code(
    body: CodeRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    await accounts.request_email_change(
        db, clients.mail, body.email, get_settings().login_code_ttl_minutes,
    )
    return {"message": "Verification code sent to the new email address"}


@router.put("/email")
async def change_email(
    body: EmailChangeRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await accounts.change_email(db, user, body.new_email, body.code)
    return {"message": "Email updated successfully", "user": dump(UserOut, user)}


@router.put("/name")
async def change_name(
    body: NameUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await accounts.change_name(db, user, body.firstname, body.lastname)
    return {"message": "Name updated successfully", "user": dump(UserOut, user)}


@router.put("/password")
async def change_password(
    body: PasswordChange,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    await accounts.change_password(db, clients.mail, user, body)
    return {"message": "Password updated successfully"}


@router.put("/profile")
async def update_profile(
    body: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await accounts.update_profile(db, user, body)
    return {"message": "Profile updated successfully", "user": dump(UserOut, user)}


@router.put("/address")
async def update_address(
    body: Address,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await accounts.update_address(db, user, body)
    return {"message": "Address updated successfully", "user": dump(UserOut, user)}


@router.post("/avatar")
async def upload_avatar(
    avatar: UploadFile = File(...),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    clients: ExternalClients = Depends(get_clients),
):
    user = await accounts.replace_avatar(db, clients.media, user, await avatar.read())
    return {"message": "Profile photo updated", "user": dump(UserOut, user)}


@router.delete("")
async def delete_account(
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await accounts.delete_user(db, user)
    clear_session_cookie(response, get_settings())
    return {"message": "Account deleted successfully"}
