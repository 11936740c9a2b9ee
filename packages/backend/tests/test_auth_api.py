"""Auth API tests.

Learn: Tests cover:
1. Registration (volunteer and NGO) + duplicate prevention
2. Login → JWT tokens
3. Token refresh
4. Protected /me endpoint
"""

import uuid

import pytest

from volunteerhub.auth.jwt import create_access_token, create_refresh_token
from volunteerhub.auth.password import hash_password


def _email(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}@example.org"


# ═══════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_volunteer(client):
    """Register a new account; the response logs it straight in."""
    email = _email("vol")
    r = await client.post(
        "/api/v1/auth/register",
        json={
            "email": email,
            "name": "Test Volunteer",
            "password": "secure_password_123",
            "role": "volunteer",
        },
    )
    assert r.status_code == 201
    body = r.json()
    assert body["tokenType"] == "bearer"
    assert body["accessToken"] and body["refreshToken"]
    assert body["user"]["name"] == "Test Volunteer"
    assert body["user"]["role"] == "volunteer"
    assert body["user"]["avatarUrl"]


@pytest.mark.asyncio
async def test_register_email_is_case_insensitive(client):
    email = _email("Case")
    body = {"email": email, "name": "One", "password": "password_123", "role": "ngo"}

    r1 = await client.post("/api/v1/auth/register", json=body)
    assert r1.status_code == 201

    r2 = await client.post(
        "/api/v1/auth/register", json={**body, "email": email.upper()}
    )
    assert r2.status_code == 409


@pytest.mark.asyncio
async def test_register_short_password(client):
    """Password must be at least 8 characters."""
    r = await client.post(
        "/api/v1/auth/register",
        json={"email": _email("short"), "name": "Short", "password": "abc", "role": "volunteer"},
    )
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_register_unknown_role(client):
    r = await client.post(
        "/api/v1/auth/register",
        json={"email": _email("role"), "name": "X", "password": "password_123", "role": "admin"},
    )
    assert r.status_code == 422


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login_success(client, make_user):
    email = _email("login")
    await make_user("Login", email=email, password_hash=hash_password("correct_horse", rounds=4))

    r = await client.post(
        "/api/v1/auth/login", json={"email": email.upper(), "password": "correct_horse"}
    )
    assert r.status_code == 200
    assert r.json()["user"]["name"] == "Login"


@pytest.mark.asyncio
async def test_login_wrong_password(client, make_user):
    email = _email("wrong")
    await make_user("Wrong", email=email, password_hash=hash_password("correct_horse", rounds=4))

    r = await client.post("/api/v1/auth/login", json={"email": email, "password": "nope_nope"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid email or password"


@pytest.mark.asyncio
async def test_login_unknown_email(client):
    r = await client.post(
        "/api/v1/auth/login", json={"email": _email("ghost"), "password": "whatever1"}
    )
    assert r.status_code == 401


# ═══════════════════════════════════════════════════════════
# Refresh
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_refresh_token(client, make_user):
    user = await make_user("Refresh")

    r = await client.post(
        "/api/v1/auth/refresh",
        json={"refreshToken": create_refresh_token(str(user.id))},
    )
    assert r.status_code == 200
    assert r.json()["user"]["id"] == str(user.id)


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(client, make_user):
    user = await make_user("Refresh")

    r = await client.post(
        "/api/v1/auth/refresh",
        json={"refreshToken": create_access_token(str(user.id))},
    )
    assert r.status_code == 401


# ═══════════════════════════════════════════════════════════
# /me
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_me(client, make_user, auth_headers):
    user = await make_user("Me", "ngo")

    r = await client.get("/api/v1/auth/me", headers=auth_headers(user))
    assert r.status_code == 200
    body = r.json()
    assert body["id"] == str(user.id)
    assert body["email"] == user.email
    assert body["role"] == "ngo"


@pytest.mark.asyncio
async def test_me_requires_auth(client):
    r = await client.get("/api/v1/auth/me")
    assert r.status_code == 401
    assert r.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_me_deleted_user(client):
    r = await client.get(
        "/api/v1/auth/me",
        headers={"Authorization": f"Bearer {create_access_token(str(uuid.uuid4()))}"},
    )
    assert r.status_code == 401
