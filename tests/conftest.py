"""Shared test fixtures."""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator

# Settings must be in place before the app module is imported.
os.environ.setdefault("APADDICTO_KV_BACKEND", "memory")
os.environ.setdefault("APADDICTO_ENVIRONMENT", "test")
os.environ.setdefault("APADDICTO_LOG_FORMAT", "console")
os.environ.setdefault("APADDICTO_RATE_LIMIT_REQUESTS", "10000")
os.environ.setdefault("APADDICTO_DATABASE_URL", "sqlite+aiosqlite:///./apaddicto-test.db")

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from apaddicto.config import get_settings  # noqa: E402
from apaddicto.database import close_db, get_engine, get_session, init_db  # noqa: E402
from apaddicto.db import models  # noqa: E402, F401
from apaddicto.db.base import Base  # noqa: E402
from apaddicto.main import create_app  # noqa: E402
from apaddicto.store import MemoryStore, close_store, set_store  # noqa: E402

get_settings.cache_clear()

ADMIN_EMAIL = "doriansarry@yahoo.fr"


@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncGenerator[str, None]:
    """A fresh file-backed SQLite database per test, schema created from the models."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'apaddicto.db'}"
    await init_db(url)
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield url
    await close_db()


@pytest_asyncio.fixture
async def store() -> AsyncGenerator[MemoryStore, None]:
    """An empty in-memory key-value store installed as the process store."""
    memory = MemoryStore()
    set_store(memory)
    yield memory
    await close_store()


@pytest_asyncio.fixture
async def client(database: str, store: MemoryStore) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the app. Cookies persist across requests."""
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest_asyncio.fixture
async def db_session(database: str) -> AsyncGenerator[AsyncSession, None]:
    """A direct database session for service-level tests and assertions."""
    async for session in get_session():
        yield session
        break


async def register(
    client: AsyncClient,
    email: str = "a@b.com",
    password: str = "pass1",
    **extra: str,
):
    """POST /api/auth/register and return the response."""
    return await client.post("/api/auth/register", json={"email": email, "password": password, **extra})


async def login(client: AsyncClient, email: str = "a@b.com", password: str = "pass1"):
    return await client.post("/api/auth/login", json={"email": email, "password": password})


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient) -> AsyncClient:
    """Client with a registered patient and an open session."""
    response = await register(client, firstName="Alice", lastName="Martin")
    assert response.status_code == 200, response.text
    return client


@pytest_asyncio.fixture
async def admin_client(client: AsyncClient) -> AsyncClient:
    """Client with a registered admin and an open session."""
    response = await register(client, email=ADMIN_EMAIL, password="admin-pass", role="admin")
    assert response.status_code == 200, response.text
    return client
