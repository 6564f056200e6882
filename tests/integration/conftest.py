"""Integration-test fixtures.

All integration tests share a single event loop so that the module-level
SQLAlchemy async engine pool (created at import time) stays valid across
the whole test session.

Pre-condition: PostgreSQL reachable at DATABASE_URL and `alembic upgrade head` applied.
"""

import uuid
from collections.abc import Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.main import app


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client; keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def unique_user() -> Callable[[], dict[str, str]]:
    """Fresh credentials per call to avoid test pollution."""

    def _make() -> dict[str, str]:
        uid = uuid.uuid4().hex[:8]
        return {
            "name": f"Tester {uid}",
            "email": f"test_{uid}@example.com",
            "password": "TestPass1",
        }

    return _make


@pytest.fixture
def signup(
    client: AsyncClient, unique_user: Callable[[], dict[str, str]]
) -> Callable[[], Awaitable[dict]]:
    """Sign up a fresh user; awaiting it returns the AuthResponse payload."""

    async def _signup() -> dict:
        resp = await client.post("/api/v1/auth/signup", json=unique_user())
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    return _signup
