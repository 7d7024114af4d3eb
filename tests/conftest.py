"""Shared test fixtures.

Tests run against an in-memory SQLite database created from the ORM metadata;
each fixture instance gets a fresh engine and therefore an empty database.
Redis is never initialized, so the rate limiter lets every request through.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable

os.environ["CPN_DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["CPN_SESSION_COOKIE_SECURE"] = "false"
os.environ["CPN_LOG_FORMAT"] = "console"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from cpn.config import get_settings  # noqa: E402
from cpn.database import close_db, create_tables, get_session, init_db  # noqa: E402
from cpn.main import create_app  # noqa: E402

get_settings.cache_clear()


@pytest.fixture
def app():
    return create_app()


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[None, None]:
    """Fresh in-memory schema for one test."""
    await init_db(get_settings().database_url)
    await create_tables()
    yield
    await close_db()


@pytest_asyncio.fixture
async def client(app, database) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP test client without a session."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def make_session_client(app, database) -> AsyncGenerator[Callable[[], Awaitable[AsyncClient]], None]:
    """Factory for clients that each register their own anonymous user."""
    opened: list[AsyncClient] = []

    async def _make() -> AsyncClient:
        ac = AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            headers={"x-session-token": str(uuid.uuid4())},
        )
        opened.append(ac)
        response = await ac.post("/api/session")
        assert response.status_code == 201, response.text
        return ac

    yield _make
    for ac in opened:
        await ac.aclose()


@pytest_asyncio.fixture
async def session_client(make_session_client) -> AsyncClient:
    """Client with a registered anonymous user."""
    return await make_session_client()


@pytest_asyncio.fixture
async def other_session_client(make_session_client) -> AsyncClient:
    """A second, unrelated user."""
    return await make_session_client()


@pytest_asyncio.fixture
async def db_session(database) -> AsyncGenerator[AsyncSession, None]:
    """Get a direct database session for test assertions."""
    async for session in get_session():
        yield session
        break


GIRL_PAYLOAD = {
    "name": "Alice",
    "age": 25,
    "nationality": "Canadian",
    "rating": 8.5,
}


@pytest.fixture
def girl_payload() -> dict:
    return dict(GIRL_PAYLOAD)
