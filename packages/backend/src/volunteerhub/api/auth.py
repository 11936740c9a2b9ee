"""Auth API — the minimal account surface the messaging core needs.

- POST /auth/register → create a volunteer or NGO account, returns tokens
- POST /auth/login → email/password → JWT tokens
- POST /auth/refresh → refresh token → new token pair
- GET /auth/me → current user info

Profiles, avatars and opportunity workflows live elsewhere.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from volunteerhub.auth.dependencies import get_current_user
from volunteerhub.auth.jwt import (
    REFRESH,
    TokenError,
    create_access_token,
    create_refresh_token,
    verify_token,
)
from volunteerhub.auth.password import hash_password, verify_password
from volunteerhub.db.engine import get_db
from volunteerhub.db.models import DEFAULT_AVATAR_URL, User
from volunteerhub.schemas.user import (
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserRead,
    UserSummary,
)

router = APIRouter(prefix="/auth")


def _tokens_for(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(str(user.id)),
        refresh_token=create_refresh_token(str(user.id)),
        user=UserSummary.model_validate(user),
    )


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Create a new account and log it in."""
    email = body.email.strip().lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalars().first():
        raise HTTPException(status_code=409, detail="Email already registered")

    user = User(
        email=email,
        name=body.name.strip(),
        role=body.role,
        avatar_url=body.avatar_url or DEFAULT_AVATAR_URL,
        password_hash=hash_password(body.password),
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration.
        await db.rollback()
        raise HTTPException(status_code=409, detail="Email already registered")
    return _tokens_for(user)


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Login with email and password → JWT tokens."""
    result = await db.execute(
        select(User).where(User.email == body.email.strip().lower())
    )
    user = result.scalars().first()

    if not user or not user.password_hash:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    return _tokens_for(user)


# ─── Refresh ────────────────────────────────────────────


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)):
    """Exchange a refresh token for a new token pair."""
    try:
        payload = verify_token(body.refresh_token, REFRESH)
    except TokenError as e:
        raise HTTPException(status_code=401, detail=str(e))

    try:
        user = await db.get(User, uuid.UUID(str(payload["sub"])))
    except ValueError:
        user = None
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return _tokens_for(user)


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=UserRead)
async def get_me(user: User = Depends(get_current_user)):
    """Get the current authenticated user's info."""
    return user
