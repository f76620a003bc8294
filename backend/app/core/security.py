"""Credentials — password hashing, session tokens and one-time codes.

Invariants:
    - Passwords hashed with bcrypt; verify_password never raises on malformed hashes
    - Session tokens are HS256 JWTs carrying sub, role, iat, exp
    - decode_session_token raises AuthenticationError for any invalid/expired token
    - Login codes are 6 numeric digits from a CSPRNG
"""

import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from app.core.domain_types import UserRole
from app.core.errors import AuthenticationError, InvalidInputError


MIN_PASSWORD_LENGTH: int = 8
LOGIN_CODE_DIGITS: int = 6
LOGIN_CODE_MAX_ATTEMPTS: int = 5

# Letter, digit and special character; used where a password is set without
# knowing the old one (reset-by-code)
_STRONG_PASSWORD = re.compile(
    r"^(?=.*[A-Za-z])(?=.*\d)(?=.*[!@#$%^&*()])[A-Za-z\d!@#$%^&*()]{8,}$",
)


@dataclass(frozen=True)
class TokenPayload:
    """Decoded contents of a session token."""
    user_id: str
    role: UserRole
    issued_at: datetime
    expires_at: datetime


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=10)).decode("utf-8")


def verify_password(password: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def create_session_token(
    *,
    user_id: str,
    role: UserRole | str,
    secret: str,
    algorithm: str = "HS256",
    expires_delta: timedelta = timedelta(hours=24),
) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "role": UserRole(role).value,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_session_token(
    token: str, *, secret: str, algorithm: str = "HS256",
) -> TokenPayload:
    try:
        data = jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Session expired. Please sign in again.")
    except jwt.PyJWTError:
        raise AuthenticationError("Invalid session token")
    try:
        return TokenPayload(
            user_id=str(data["sub"]),
            role=UserRole(data["role"]),
            issued_at=datetime.fromtimestamp(int(data["iat"]), tz=timezone.utc),
            expires_at=datetime.fromtimestamp(int(data["exp"]), tz=timezone.utc),
        )
    except (KeyError, ValueError):
        raise AuthenticationError("Invalid session token")


def check_new_password(new_password: str | None, confirm_password: str | None) -> None:
    """Length and confirmation checks shared by password change flows."""
    if not new_password or len(new_password) < MIN_PASSWORD_LENGTH:
        raise InvalidInputError(
            "New password must be at least 8 characters long.", field="new_password",
        )
    if not confirm_password or new_password != confirm_password:
        raise InvalidInputError("Passwords do not match.", field="confirm_password")


def check_strong_password(password: str) -> None:
    if not _STRONG_PASSWORD.match(password):
        raise InvalidInputError(
            "Password must be at least 8 characters long and contain at least "
            "one letter, one number and one special character.",
            field="new_password",
        )


def generate_login_code() -> str:
    return f"{secrets.randbelow(10 ** LOGIN_CODE_DIGITS):0{LOGIN_CODE_DIGITS}d}"


def codes_match(submitted: str, stored: str) -> bool:
    return secrets.compare_digest(submitted.strip(), stored)
