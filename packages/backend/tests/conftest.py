"""Test fixtures — a throwaway SQLite database per test.

Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own database file under tmp_path, schema created
   from the models (no Alembic, no Postgres needed).
2. REST tests override get_db so every request uses that database.
3. Gateway tests build a RealtimeGateway on the same session factory
   and talk to it through FakeConnection handles instead of sockets.
"""

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from volunteerhub.auth.jwt import create_access_token
from volunteerhub.db.engine import get_db
from volunteerhub.db.models import Base, User
from volunteerhub.main import app
from volunteerhub.realtime.connection import ConnectionClosedError
from volunteerhub.realtime.gateway import RealtimeGateway
from volunteerhub.realtime.registry import ConnectionRegistry


class FakeConnection:
    """In-memory stand-in for a WebSocket: records every pushed event."""

    def __init__(self, name: str = "conn"):
        self.id = f"{name}-{uuid.uuid4().hex[:6]}"
        self.sent: list[tuple[str, object]] = []
        self.closed = False

    async def send(self, event, data):
        if self.closed:
            raise ConnectionClosedError(self.id)
        self.sent.append((event, data))

    def events(self, name: str) -> list:
        return [data for event, data in self.sent if event == name]


@pytest_asyncio.fixture()
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def make_user(session_factory):
    """Factory: insert a user and return it (detached, attributes loaded)."""

    async def _make(name: str = "User", role: str = "volunteer", **kwargs) -> User:
        user = User(
            email=kwargs.pop("email", f"{name.lower()}-{uuid.uuid4().hex[:8]}@example.org"),
            name=name,
            role=role,
            **kwargs,
        )
        async with session_factory() as session:
            session.add(user)
            await session.commit()
        return user

    return _make


@pytest.fixture()
def token_for():
    def _token(user: User) -> str:
        return create_access_token(str(user.id))
    return _token


@pytest.fixture()
def auth_headers(token_for):
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {token_for(user)}"}
    return _headers


@pytest.fixture()
def registry():
    return ConnectionRegistry()


@pytest.fixture()
def gateway(registry, session_factory):
    return RealtimeGateway(registry, session_factory)


@pytest.fixture()
def connection():
    """Factory for FakeConnection handles."""
    return FakeConnection


@pytest_asyncio.fixture()
async def client(session_factory, gateway):
    """HTTP client with the app's get_db and gateway pointed at the test DB."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    original_gateway, original_registry = app.state.gateway, app.state.registry
    app.state.gateway, app.state.registry = gateway, gateway.registry

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    app.state.gateway, app.state.registry = original_gateway, original_registry
