"""Password hashing and bearer tokens.

Passwords are stored as bcrypt hashes; access tokens are HS256 JWTs carrying
the user id (``sub``) and role.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import Settings
from src.exceptions import AuthenticationError
from src.models.user import User

logger = logging.getLogger(__name__)


def hash_password(plain_password: str) -> str:
    hashed = bcrypt.hashpw(plain_password.encode("utf-8"), bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"), password_hash.encode("utf-8")
        )
    except ValueError:
        # Stored hash is not a bcrypt hash.
        return False


def create_access_token(user: User, settings: Settings) -> str:
    """Sign a token for *user* that expires after the configured lifetime."""
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=settings.access_token_expire_minutes
    )
    claims: dict[str, Any] = {
        "sub": str(user.id),
        "role": user.role,
        "exp": expire,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> uuid.UUID:
    """Return the user id carried by *token*.

    Raises:
        AuthenticationError: If the token is malformed, expired or unsigned.
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
    except JWTError as exc:
        raise AuthenticationError("Could not validate credentials") from exc

    subject = payload.get("sub")
    if not subject:
        raise AuthenticationError("Could not validate credentials")
    try:
        return uuid.UUID(subject)
    except ValueError as exc:
        raise AuthenticationError("Could not validate credentials") from exc


async def authenticate(session: AsyncSession, email: str, password: str) -> User:
    """Return the active user matching *email* and *password*.

    Raises:
        AuthenticationError: On unknown email, wrong password or inactive user.
    """
    stmt = select(User).where(User.email == email.strip().lower())
    result = await session.execute(stmt)
    user = result.scalar_one_or_none()
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Failed login for %s", email)
        raise AuthenticationError("Invalid email or password")
    if not user.is_active:
        raise AuthenticationError("Account is disabled")
    return user
