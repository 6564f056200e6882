"""Refresh-token persistence.

Refresh tokens are opaque strings stored in ``refresh_tokens``. The usage
counter is bumped with a single conditional UPDATE ... RETURNING so two
concurrent refreshes can never push ``used_count`` past the limit.

Transaction ownership: the CALLER commits or rolls back.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ft_auth.user.db_models import RefreshTokenModel
from src.ft_common.datetime_utils import as_utc
from src.ft_common.errors import InternalError


@dataclass
class RefreshTokenRecord:
    id: int
    user_id: int
    token: str
    device_id: str | None
    used_count: int
    expires_at: datetime


class RefreshTokenRepositoryProtocol(Protocol):
    async def create(
        self,
        db: AsyncSession,
        user_id: int,
        token: str,
        expires_at: datetime,
        device_id: str | None = None,
    ) -> RefreshTokenRecord: ...

    async def get_by_token(self, db: AsyncSession, token: str) -> RefreshTokenRecord | None: ...

    async def increment_usage(
        self,
        db: AsyncSession,
        token: str,
        device_id: str | None,
        usage_limit: int,
    ) -> RefreshTokenRecord | None: ...


_INSERT_SQL = text("""
    INSERT INTO refresh_tokens (user_id, token, device_id, used_count, expires_at)
    VALUES (:user_id, :token, :device_id, 0, :expires_at)
    RETURNING id, user_id, token, device_id, used_count, expires_at
""")

# Conditional on the limit: 0 rows means another request used the last slot.
_INCREMENT_USAGE_SQL = text("""
    UPDATE refresh_tokens
    SET used_count = used_count + 1,
        device_id  = COALESCE(:device_id, device_id),
        updated_at = NOW()
    WHERE token = :token AND used_count < :usage_limit
    RETURNING id, user_id, token, device_id, used_count, expires_at
""")


def _row_to_record(row: object) -> RefreshTokenRecord:
    return RefreshTokenRecord(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        token=row.token,  # type: ignore[attr-defined]
        device_id=row.device_id,  # type: ignore[attr-defined]
        used_count=row.used_count,  # type: ignore[attr-defined]
        expires_at=as_utc(row.expires_at),  # type: ignore[attr-defined]
    )


class RefreshTokenRepository:
    async def create(
        self,
        db: AsyncSession,
        user_id: int,
        token: str,
        expires_at: datetime,
        device_id: str | None = None,
    ) -> RefreshTokenRecord:
        result = await db.execute(
            _INSERT_SQL,
            {
                "user_id": user_id,
                "token": token,
                "device_id": device_id,
                "expires_at": expires_at,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Refresh token insert returned no rows")
        return _row_to_record(row)

    async def get_by_token(self, db: AsyncSession, token: str) -> RefreshTokenRecord | None:
        result = await db.execute(
            select(RefreshTokenModel).where(RefreshTokenModel.token == token)
        )
        model = result.scalar_one_or_none()
        return _row_to_record(model) if model else None

    async def increment_usage(
        self,
        db: AsyncSession,
        token: str,
        device_id: str | None,
        usage_limit: int,
    ) -> RefreshTokenRecord | None:
        result = await db.execute(
            _INCREMENT_USAGE_SQL,
            {"token": token, "device_id": device_id, "usage_limit": usage_limit},
        )
        row = result.fetchone()
        return _row_to_record(row) if row else None
