"""Password hashing and JWT helpers."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, Literal

import bcrypt
from jose import JWTError, jwt

from freestealer.core.settings import settings

TokenType = Literal["access", "refresh", "session"]

__all__ = [
    "JWTError",
    "TokenType",
    "create_token",
    "create_token_pair",
    "decode_token",
    "hash_password",
    "verify_password",
]


def hash_password(password: str) -> str:
    """Return a bcrypt hash of ``password``."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Return True if ``password`` matches ``password_hash``."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash.
        return False


def _lifetime(token_type: TokenType) -> timedelta:
    if token_type == "refresh":
        return timedelta(minutes=settings.refresh_token_expire_minutes)
    return timedelta(minutes=settings.access_token_expire_minutes)


def create_token(
    user_id: int,
    token_type: TokenType,
    extra_claims: dict[str, Any] | None = None,
) -> str:
    """Create a signed JWT for ``user_id``.

    Args:
        user_id: Primary key of the authenticated user.
        token_type: ``access`` and ``session`` tokens share the access lifetime;
            ``refresh`` tokens live longer and carry no profile claims.
        extra_claims: Additional claims merged into the payload.

    Returns:
        The encoded token.
    """
    now = datetime.now(UTC)
    to_encode: dict[str, Any] = {
        "sub": str(user_id),
        "user_id": user_id,
        "type": token_type,
        "iss": settings.jwt_issuer,
        "iat": now,
        "nbf": now,
        "exp": now + _lifetime(token_type),
    }
    if extra_claims:
        to_encode.update(extra_claims)
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.effective_jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def create_token_pair(user_id: int, username: str, email: str) -> dict[str, Any]:
    """Return the access/refresh token bundle handed to clients."""
    access_token = create_token(
        user_id,
        "access",
        {"username": username, "email": email},
    )
    refresh_token = create_token(user_id, "refresh")
    return {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "token_type": "bearer",
        "expires_in": settings.access_token_expire_minutes * 60,
    }


def decode_token(token: str, expected_type: TokenType) -> int:
    """Validate ``token`` and return the user id it was issued for.

    Raises:
        JWTError: The signature, expiry, issuer or token type is invalid.
    """
    payload = jwt.decode(
        token,
        settings.effective_jwt_secret,
        algorithms=[settings.jwt_algorithm],
        issuer=settings.jwt_issuer,
    )
    if payload.get("type") != expected_type:
        raise JWTError(f"Expected a {expected_type} token")
    subject = payload.get("sub")
    if subject is None:
        raise JWTError("Token has no subject")
    try:
        return int(subject)
    except (TypeError, ValueError) as err:
        raise JWTError("Token subject is not a user id") from err
