"""JWT access/refresh tokens carrying the caller identity (user ID, email, verified flag)."""

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from weightwise.config import settings

ACCESS = "access"
REFRESH = "refresh"


def _encode(claims: dict[str, Any], token_type: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = {**claims, "iat": now, "exp": now + lifetime, "type": token_type}
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(
    user_id: str,
    email: str | None = None,
    email_verified: bool = False,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a short-lived access token.

    ``email`` and ``email_verified`` are informational copies; the user row
    remains the source of truth.
    """
    claims: dict[str, Any] = {"sub": user_id, "email_verified": email_verified}
    if email is not None:
        claims["email"] = email
    lifetime = expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    return _encode(claims, ACCESS, lifetime)


def create_refresh_token(user_id: str, expires_delta: timedelta | None = None) -> str:
    """Create a long-lived refresh token (subject only)."""
    lifetime = expires_delta or timedelta(days=settings.jwt_refresh_token_expire_days)
    return _encode({"sub": user_id}, REFRESH, lifetime)


def decode_token(token: str, expected_type: str | None = None) -> dict[str, Any]:
    """Decode and verify a JWT token.

    Raises:
        jose.JWTError: If the token is invalid, expired, malformed, or not of
            ``expected_type``.
    """
    payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    if expected_type is not None and payload.get("type") != expected_type:
        raise JWTError(f"Expected a {expected_type} token")
    return payload


def create_token_pair(
    user_id: str, email: str | None = None, email_verified: bool = False
) -> dict[str, str]:
    """Create both access and refresh tokens for a user."""
    return {
        "access_token": create_access_token(user_id, email, email_verified),
        "refresh_token": create_refresh_token(user_id),
        "token_type": "bearer",
    }
