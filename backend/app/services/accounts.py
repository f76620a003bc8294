"""Account Self-Service — email, name, password, profile, address, avatar and account deletion.

Invariants:
    - Password change checks run in a fixed order: length, confirmation, current password, reuse
    - A WhatsApp number belongs to at most one account
    - Submitting a NIN moves KYC to pending unless already verified
    - delete_user removes login codes and favorites before the user row

Design Decisions:
    - delete_user shared by self-deletion and admin deletion: one cascade definition
"""

import logging
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.datetimes import utc_now
from app.core.domain_types import KycStatus, TimestampType
from app.core.errors import (
    AuthenticationError, ConflictError, ErrorContext, InvalidInputError,
)
from app.core.repository_protocols import MailSender, MediaStorage
from app.core.security import check_new_password, hash_password, verify_password
from app.models.favorite import Favorite
from app.models.login_code import LoginCode
from app.models.user import User
from app.schemas.user import Address, PasswordChange, ProfileUpdate
from app.services.auth import consume_code, find_user_by_email, issue_code
from app.services.media_cleanup import destroy_quietly
from app.services.notifications import notify
from app.services.timestamps import touch

logger = logging.getLogger(__name__)


async def request_email_change(
    db: AsyncSession, mail: MailSender, new_email: str, ttl_minutes: int,
) -> None:
    if await find_user_by_email(db, new_email):
        raise ConflictError("Email is already in use.")
    await issue_code(db, mail, new_email, ttl_minutes, require_account=False)


async def change_email(
    db: AsyncSession, user: User, new_email: str, code: str,
) -> User:
    existing = await find_user_by_email(db, new_email)
    if existing is not None and existing.id != user.id:
        raise ConflictError("Email is already in use.")
    await consume_code(db, new_email, code)
    user.email = new_email
    await touch(db, TimestampType.USER)
    await db.commit()
    logger.info("Email changed", extra={"user_id": str(user.id)})
    return user


async def change_name(
    db: AsyncSession, user: User, firstname: str, lastname: str | None,
) -> User:
    user.firstname = firstname.strip()
    user.lastname = (lastname or "").strip() or None
    await touch(db, TimestampType.USER)
    await db.commit()
    return user


async def change_password(
    db: AsyncSession, mail: MailSender, user: User, body: PasswordChange,
) -> None:
    ctx = ErrorContext(user_id=str(user.id))
    check_new_password(body.new_password, body.confirm_password)
    if not verify_password(body.current_password, user.password_hash):
        raise AuthenticationError("Current password is incorrect.", context=ctx)
    if verify_password(body.new_password, user.password_hash):
        raise InvalidInputError(
            "New password must be different from the current password.",
            field="new_password", context=ctx,
        )
    user.password_hash = hash_password(body.new_password)
    await touch(db, TimestampType.USER)
    await db.commit()
    logger.info("Password changed", extra={"user_id": str(user.id)})

    await notify(
        mail, to=user.email, subject="Your password was changed",
        template="password_changed.html", firstname=user.firstname,
        changed_at=utc_now().strftime("%d %B %Y, %H:%M UTC"),
    )


async def _whatsapp_taken(db: AsyncSession, number: str, user_id: UUID) -> bool:
    result = await db.execute(
        select(User.id)
        .where(User.id != user_id)
        .where(User.socials["whatsapp"].as_string() == number)
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def update_profile(db: AsyncSession, user: User, body: ProfileUpdate) -> User:
    socials = body.socials.model_dump()
    whatsapp = (socials.get("whatsapp") or "").strip()
    if whatsapp and await _whatsapp_taken(db, whatsapp, user.id):
        raise ConflictError("WhatsApp number is already in use by another account.")

    user.socials = socials
    user.description = body.description
    user.organization = body.organization
    user.website_url = body.website_url
    user.username = body.username
    if body.number is not None:
        user.number = body.number
    nin = (body.nin or "").strip()
    if nin:
        user.nin = nin
        if user.kyc_status != KycStatus.VERIFIED.value:
            user.kyc_status = KycStatus.PENDING.value
    await touch(db, TimestampType.USER)
    await db.commit()
    logger.info("Profile updated", extra={"user_id": str(user.id)})
    return user


async def update_address(db: AsyncSession, user: User, address: Address) -> User:
    user.address = address.model_dump()
    await touch(db, TimestampType.USER)
    await db.commit()
    return user


async def replace_avatar(
    db: AsyncSession, media: MediaStorage, user: User, data: bytes,
) -> User:
    uploaded = await media.upload(data, folder="avatars")
    previous = (user.profile_photo or {}).get("public_id")
    user.profile_photo = uploaded
    await touch(db, TimestampType.USER)
    await db.commit()
    if previous:
        await destroy_quietly(media, previous)
    logger.info("Avatar replaced", extra={"user_id": str(user.id)})
    return user


async def delete_user(db: AsyncSession, user: User) -> None:
    await db.execute(delete(LoginCode).where(LoginCode.email == user.email))
    await db.execute(delete(Favorite).where(Favorite.user_id == user.id))
    await db.delete(user)
    await touch(db, TimestampType.USER)
    await db.commit()
    logger.info("User deleted", extra={"user_id": str(user.id)})
