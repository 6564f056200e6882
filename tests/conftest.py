"""Shared test fixtures.

JWT_SECRET has no default in Settings, so it is set here before anything
imports config.settings.
"""

import os

os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-production")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.main import app  # noqa: E402


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints (lifespan not run, no DB ping)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
