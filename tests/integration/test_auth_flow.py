"""Integration tests for signup, login and refresh (requires running PG).

Run: pytest -m integration tests/integration/test_auth_flow.py -v
"""

from dataclasses import replace
from unittest.mock import patch

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from src.ft_auth.auth.dependencies import get_token_service
from src.ft_auth.user.db_models import RefreshTokenModel, UserModel
from src.ft_common.database import async_session_factory

# All tests in this module share the session-scoped event loop so that the
# module-level SQLAlchemy async engine pool stays alive across tests.
pytestmark = [pytest.mark.integration, pytest.mark.asyncio(loop_scope="session")]


def bearer(auth: dict) -> dict[str, str]:
    return {"Authorization": f"Bearer {auth['accessToken']}"}


class TestSignup:
    async def test_signup_returns_token_pair(self, client: AsyncClient, unique_user) -> None:
        user = unique_user()
        resp = await client.post("/api/v1/auth/signup", json=user)
        assert resp.status_code == 201
        body = resp.json()
        assert body["code"] == 0
        data = body["data"]
        assert data["user"]["email"] == user["email"]
        assert data["user"]["currency"] == "IDR"
        assert data["accessToken"]
        assert len(data["refreshToken"]) == 32
        assert data["tokenType"] == "Bearer"

    async def test_duplicate_email_is_409_and_creates_nothing(
        self, client: AsyncClient, unique_user
    ) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/signup", json=user)
        resp = await client.post("/api/v1/auth/signup", json={**user, "name": "Other"})
        assert resp.status_code == 409
        assert resp.json()["code"] == 1002

        async with async_session_factory() as db:
            count = await db.scalar(
                select(func.count()).select_from(UserModel).where(UserModel.email == user["email"])
            )
        assert count == 1

    async def test_signup_seeds_default_categories(self, client: AsyncClient, signup) -> None:
        auth = await signup()
        resp = await client.get("/api/v1/categories", headers=bearer(auth))
        assert resp.status_code == 200
        types = {c["type"] for c in resp.json()["data"]}
        assert types == {"income", "expense"}


class TestLogin:
    async def test_login_success(self, client: AsyncClient, unique_user) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/signup", json=user)
        resp = await client.post(
            "/api/v1/auth/login", json={"email": user["email"], "password": user["password"]}
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["user"]["email"] == user["email"]

    async def test_wrong_password(self, client: AsyncClient, unique_user) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/signup", json=user)
        resp = await client.post(
            "/api/v1/auth/login", json={"email": user["email"], "password": "WrongPass9"}
        )
        assert resp.status_code == 401
        assert resp.json()["code"] == 1003


class TestRefresh:
    async def test_refresh_endpoint_counts_uses(self, client: AsyncClient, signup) -> None:
        auth = await signup()
        for _ in range(2):
            resp = await client.post(
                "/api/v1/auth/refresh", json={"refreshToken": auth["refreshToken"]}
            )
            assert resp.status_code == 200
            assert resp.json()["data"]["refreshToken"] == auth["refreshToken"]

        async with async_session_factory() as db:
            used = await db.scalar(
                select(RefreshTokenModel.used_count).where(
                    RefreshTokenModel.token == auth["refreshToken"]
                )
            )
        assert used == 2

    async def test_transparent_refresh_on_protected_route(self, client: AsyncClient, signup) -> None:
        auth = await signup()
        tokens = get_token_service()
        expired_config = replace(tokens.config, access_ttl=-tokens.config.access_ttl)
        with patch.object(tokens, "_config", expired_config):
            expired = tokens.issue_access_token(auth["user"]["id"], auth["user"]["email"])

        resp = await client.get(
            "/api/v1/income/balance",
            headers={"Authorization": f"Bearer {expired}", "X-Refresh-Token": auth["refreshToken"]},
        )

        assert resp.status_code == 200
        assert resp.headers["x-refresh-token"] == auth["refreshToken"]
        follow_up = await client.get(
            "/api/v1/auth/profile",
            headers={"Authorization": f"Bearer {resp.headers['x-token']}"},
        )
        assert follow_up.status_code == 200
        assert follow_up.json()["data"]["id"] == auth["user"]["id"]

    async def test_exhausted_refresh_token(self, client: AsyncClient, signup) -> None:
        auth = await signup()
        async with async_session_factory() as db:
            row = await db.scalar(
                select(RefreshTokenModel).where(RefreshTokenModel.token == auth["refreshToken"])
            )
            row.used_count = 30
            await db.commit()

        resp = await client.post("/api/v1/auth/refresh", json={"refreshToken": auth["refreshToken"]})
        assert resp.status_code == 401
        assert resp.json()["code"] == 1010
