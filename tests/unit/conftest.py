"""In-memory stand-ins for the auth repositories.

They follow the same Protocols as the SQL repositories, including the
conditional usage increment, so resolver tests exercise the real state
machine and TokenService without a database.
"""

from dataclasses import replace
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from src.ft_auth.auth.refresh_store import RefreshTokenRecord
from src.ft_auth.auth.session import SessionResolver
from src.ft_auth.auth.token_service import TokenConfig, TokenService
from src.ft_auth.user.db_models import UserModel

TEST_SECRET = "unit-test-secret"


class InMemoryRefreshTokens:
    def __init__(self) -> None:
        self.rows: dict[str, RefreshTokenRecord] = {}
        self.fail_on_increment = False

    async def create(self, db, user_id, token, expires_at, device_id=None):  # type: ignore[no-untyped-def]
        record = RefreshTokenRecord(
            id=len(self.rows) + 1,
            user_id=user_id,
            token=token,
            device_id=device_id,
            used_count=0,
            expires_at=expires_at,
        )
        self.rows[token] = record
        return replace(record)

    async def get_by_token(self, db, token):  # type: ignore[no-untyped-def]
        record = self.rows.get(token)
        return replace(record) if record else None

    async def increment_usage(self, db, token, device_id, usage_limit):  # type: ignore[no-untyped-def]
        if self.fail_on_increment:
            raise OperationalError("UPDATE refresh_tokens", {}, Exception("connection lost"))
        record = self.rows.get(token)
        if record is None or record.used_count >= usage_limit:
            return None
        record.used_count += 1
        if device_id:
            record.device_id = device_id
        return replace(record)


class InMemoryUsers:
    def __init__(self) -> None:
        self.users: dict[int, UserModel] = {}

    def add_user(self, user_id: int, name: str = "Alice", email: str = "alice@example.com") -> UserModel:
        user = UserModel()
        user.id = user_id
        user.name = name
        user.email = email
        user.password_hash = "$2b$12$fakehash"
        user.currency = "IDR"
        user.first_signin_completed = False
        self.users[user_id] = user
        return user

    async def get_by_id(self, db, user_id):  # type: ignore[no-untyped-def]
        return self.users.get(user_id)


def make_config(**overrides: object) -> TokenConfig:
    return TokenConfig(secret=TEST_SECRET, **overrides)  # type: ignore[arg-type]


@pytest.fixture
def refresh_tokens() -> InMemoryRefreshTokens:
    return InMemoryRefreshTokens()


@pytest.fixture
def users() -> InMemoryUsers:
    store = InMemoryUsers()
    store.add_user(7)
    return store


@pytest.fixture
def token_service(refresh_tokens: InMemoryRefreshTokens) -> TokenService:
    return TokenService(make_config(), refresh_repo=refresh_tokens)


@pytest.fixture
def expired_token_service(refresh_tokens: InMemoryRefreshTokens) -> TokenService:
    """Same secret, negative TTL: every access token it issues is already expired."""
    return TokenService(make_config(access_ttl=timedelta(seconds=-5)), refresh_repo=refresh_tokens)


@pytest.fixture
def resolver(token_service: TokenService, users: InMemoryUsers) -> SessionResolver:
    return SessionResolver(token_service, user_repo=users)


@pytest.fixture
def mock_db() -> AsyncMock:
    return AsyncMock()
