"""Authentication Flows — registration, password login, one-time codes and password reset.

Invariants:
    - Wrong email and wrong password produce the same 401 message
    - Suspended or banned accounts cannot sign in (403), whatever the credentials path
    - At most one live code per email; a consumed or expired code is deleted
    - A code is deleted after LOGIN_CODE_MAX_ATTEMPTS wrong guesses
    - Code delivery is NOT best-effort: a code nobody receives is useless, so send failures raise

Design Decisions:
    - Login codes double as reset and email-change codes: one table, one TTL
    - Registration mails are best-effort (services/notifications.py): the account exists either way
"""

import logging
from datetime import timedelta

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.core.datetimes import as_utc, utc_now
from app.core.domain_types import TimestampType, UserStatus
from app.core.errors import (
    AuthenticationError, ConflictError, ErrorContext, InvalidInputError,
    PermissionDeniedError, ResourceNotFoundError,
)
from app.core.repository_protocols import MailSender
from app.core.security import (
    LOGIN_CODE_MAX_ATTEMPTS, MIN_PASSWORD_LENGTH, check_new_password,
    check_strong_password, codes_match, create_session_token,
    generate_login_code, hash_password, verify_password,
)
from app.infrastructure.mailer import render_email
from app.models.login_code import LoginCode
from app.models.user import User
from app.schemas.user import PasswordResetRequest, RegisterRequest
from app.services.notifications import notify
from app.services.timestamps import touch

logger = logging.getLogger(__name__)


async def find_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email.strip().lower()))
    return result.scalar_one_or_none()


def check_account_active(user: User) -> None:
    if user.status != UserStatus.ACTIVE.value:
        raise PermissionDeniedError(
            f"Your account is {user.status}. Please contact support.",
            context=ErrorContext(user_id=str(user.id)),
        )


def issue_session_token(user: User, settings: Settings) -> str:
    return create_session_token(
        user_id=str(user.id),
        role=user.role,
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expires_delta=timedelta(hours=settings.jwt_expiry_hours),
    )


async def register(
    db: AsyncSession, mail: MailSender, body: RegisterRequest, settings: Settings,
) -> User:
    if len(body.password) < MIN_PASSWORD_LENGTH:
        raise InvalidInputError(
            "Password must be at least 8 characters long.", field="password",
        )
    if await find_user_by_email(db, body.email):
        raise ConflictError("An account with this email already exists.")

    user = User(
        email=body.email,
        firstname=body.firstname.strip(),
        lastname=(body.lastname or "").strip() or None,
        role=body.role,
        password_hash=hash_password(body.password),
        listing_limit=settings.default_listing_limit,
    )
    db.add(user)
    await touch(db, TimestampType.USER)
    await db.commit()
    await db.refresh(user)
    logger.info("User registered", extra={"user_id": str(user.id)})

    await notify(
        mail, to=user.email, subject="Welcome to HouseHunter",
        template="welcome.html", firstname=user.firstname, role=user.role,
    )
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    user = await find_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        raise AuthenticationError("Invalid email or password.")
    check_account_active(user)
    logger.info("User signed in", extra={"user_id": str(user.id)})
    return user


async def issue_code(
    db: AsyncSession,
    mail: MailSender,
    email: str,
    ttl_minutes: int,
    *,
    require_account: bool = True,
) -> None:
    """Create or replace the code for email and mail it."""
    email = email.strip().lower()
    if require_account and await find_user_by_email(db, email) is None:
        raise ResourceNotFoundError("User", email)

    code = generate_login_code()
    await db.execute(delete(LoginCode).where(LoginCode.email == email))
    db.add(LoginCode(
        email=email,
        code=code,
        expires_at=utc_now() + timedelta(minutes=ttl_minutes),
    ))
    await db.commit()

    await mail.send(
        to=email,
        subject="Your HouseHunter verification code",
        html=render_email("login_code.html", code=code, ttl_minutes=ttl_minutes),
    )
    logger.info("Verification code issued", extra={"resource": "login_code"})


async def consume_code(db: AsyncSession, email: str, code: str) -> None:
    """Validate and delete the code for email. Flushes; the caller commits."""
    email = email.strip().lower()
    result = await db.execute(select(LoginCode).where(LoginCode.email == email))
    stored = result.scalar_one_or_none()
    if stored is None:
        raise InvalidInputError("Invalid verification code.", field="code")
    if not codes_match(code, stored.code):
        stored.failed_attempts += 1
        if stored.failed_attempts >= LOGIN_CODE_MAX_ATTEMPTS:
            await db.delete(stored)
            await db.commit()
            logger.warning("Verification code revoked after repeated wrong guesses")
            raise InvalidInputError(
                "Too many wrong attempts. Please request a new code.", field="code",
            )
        await db.commit()
        raise InvalidInputError("Invalid verification code.", field="code")
    if as_utc(stored.expires_at) < utc_now():
        await db.delete(stored)
        await db.commit()
        raise InvalidInputError(
            "Verification code has expired. Please request a new one.", field="code",
        )
    await db.delete(stored)
    await db.flush()


async def login_with_code(db: AsyncSession, email: str, code: str) -> User:
    user = await find_user_by_email(db, email)
    if user is None:
        raise ResourceNotFoundError("User", email)
    check_account_active(user)
    await consume_code(db, email, code)
    await db.commit()
    logger.info("User signed in with code", extra={"user_id": str(user.id)})
    return user


async def reset_password(
    db: AsyncSession, mail: MailSender, body: PasswordResetRequest,
) -> None:
    check_new_password(body.new_password, body.confirm_password)
    check_strong_password(body.new_password)
    user = await find_user_by_email(db, body.email)
    if user is None:
        raise ResourceNotFoundError("User", body.email)
    await consume_code(db, body.email, body.code)

    user.password_hash = hash_password(body.new_password)
    await touch(db, TimestampType.USER)
    await db.commit()
    logger.info("Password reset", extra={"user_id": str(user.id)})

    await notify(
        mail, to=user.email, subject="Your password was changed",
        template="password_changed.html", firstname=user.firstname,
        changed_at=utc_now().strftime("%d %B %Y, %H:%M UTC"),
    )
