"""JWT issue and verification.

Two token types share one signing key and differ only in the ``type``
claim and lifetime:

- access: REST calls and the WebSocket handshake (3 days by default)
- refresh: only ever exchanged at /auth/refresh for a new pair

``sub`` is the user's UUID as a string.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from volunteerhub.config import settings

ACCESS = "access"
REFRESH = "refresh"


class TokenError(Exception):
    """Raised when a token cannot be trusted."""


def _issue(user_id: str, token_type: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    claims = {"sub": user_id, "type": token_type, "iat": now, "exp": now + lifetime}
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: str, expires_minutes: Optional[int] = None) -> str:
    if expires_minutes is None:
        expires_minutes = settings.access_token_expire_minutes
    return _issue(user_id, ACCESS, timedelta(minutes=expires_minutes))


def create_refresh_token(user_id: str, expires_days: Optional[int] = None) -> str:
    if expires_days is None:
        expires_days = settings.refresh_token_expire_days
    return _issue(user_id, REFRESH, timedelta(days=expires_days))


def verify_token(token: str, expected_type: Optional[str] = None) -> dict:
    """Decode ``token`` and return its claims.

    Signature, expiry and a non-empty ``sub`` are always checked; the
    ``type`` claim only when ``expected_type`` is given.
    """
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}")

    if not claims.get("sub"):
        raise TokenError("Invalid token: missing subject")
    if expected_type is not None and claims.get("type") != expected_type:
        raise TokenError(f"Wrong token type: expected {expected_type}")
    return claims


def verify_access_token(token: str) -> dict:
    return verify_token(token, ACCESS)
