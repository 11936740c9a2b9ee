"""Pydantic schemas for users as the messaging core sees them."""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from volunteerhub.schemas import CamelModel

Role = Literal["volunteer", "ngo"]


class UserSummary(CamelModel):
    """Display-ready identity embedded in populated records."""
    id: uuid.UUID
    name: str
    role: str
    avatar_url: Optional[str] = None


class UserRead(UserSummary):
    email: str
    created_at: datetime


class RegisterRequest(CamelModel):
    email: str = Field(..., min_length=3, max_length=255)
    name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=8)
    role: Role
    avatar_url: Optional[str] = None


class LoginRequest(CamelModel):
    email: str
    password: str


class TokenResponse(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserSummary


class RefreshRequest(CamelModel):
    refresh_token: str
