"""
Safe Haven Backend: Credential Hashing and Access Tokens
==========================================================

What:  Password hashing (passlib bcrypt) and bearer tokens (PyJWT, HS256).
Who:   UserService (register, login, auto-created clients), the seed script,
       and the `get_current_user` dependency.

The hash never leaves the storage boundary: response schemas do not
declare a password field, so FastAPI cannot serialize it.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from passlib.context import CryptContext

from safehaven.config import settings
from safehaven.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """False for a wrong password and for a malformed or empty hash."""
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError) as e:
        logger.error("Password verification error: %s", e)
        return False


def generate_temporary_password() -> str:
    """Random secret for clients created from a booking request (they reset it later)."""
    return secrets.token_urlsafe(12)


def create_access_token(
    user_id: str,
    role: str,
    expires_minutes: Optional[int] = None,
) -> str:
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=expires_minutes or settings.jwt_expires_minutes)
    payload = {"sub": str(user_id), "role": role, "iat": now, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Session expired. Please sign in again.")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid authentication token")

    if not payload.get("sub"):
        raise AuthenticationError("Invalid token subject")
    return payload
