"""FastAPI auth dependencies.

Used as Depends() in route handlers to turn the bearer token into the
live User record making the request.
"""

import uuid
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from volunteerhub.auth.jwt import TokenError, verify_access_token
from volunteerhub.db.engine import get_db
from volunteerhub.db.models import User
from volunteerhub.errors import AuthError


async def resolve_token_user(token: Optional[str], db: AsyncSession) -> User:
    """Decode an access token and load the user it names.

    Raises AuthError if the token is absent, invalid, expired, malformed,
    or the user no longer exists.
    """
    if not token:
        raise AuthError("No token provided")
    try:
        payload = verify_access_token(token)
        user_id = uuid.UUID(str(payload["sub"]))
    except TokenError as e:
        raise AuthError(str(e))
    except ValueError:
        raise AuthError("Invalid token: malformed subject")

    user = await db.get(User, user_id)
    if user is None:
        raise AuthError("User not found")
    return user


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an 'Authorization: Bearer <token>' value."""
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:].strip() or None
    return None


async def get_current_user(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the current user (required — 401 if no valid auth)."""
    try:
        return await resolve_token_user(bearer_token(authorization), db)
    except AuthError as e:
        raise HTTPException(
            status_code=401,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
