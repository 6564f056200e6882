"""Session resolver: turns request credentials into a SessionContext.

State machine, evaluated once per request:

    NO_AUTH ──► ACCESS_VALID                      (common, cheap path)
       │
       ├──► ACCESS_INVALID                        (401, no refresh attempt)
       │
       └──► access expired ──► refresh attempt ──► REFRESH_SUCCESS
                                              └──► REFRESH_FAILURE (401)

On REFRESH_SUCCESS a new access token is minted, the refresh token's
``used_count`` is bumped and committed, and both tokens are handed back so the
HTTP layer can surface them as ``X-Token`` / ``X-Refresh-Token``. The request
then continues without the client having to retry.

Failures never yield a partial session: the resolver either returns a full
context or raises an AppError (401) before any business logic runs.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.ft_auth.auth.token_service import TokenService
from src.ft_auth.user.db_models import UserModel
from src.ft_auth.user.repository import UserRepository, UserRepositoryProtocol
from src.ft_common.enums import SessionState
from src.ft_common.errors import (
    AccessTokenExpiredError,
    AppError,
    InvalidAccessTokenError,
    MissingTokenError,
    RefreshPersistenceError,
    RefreshTokenMissingError,
    SessionUserNotFoundError,
)

logger = logging.getLogger("ft.auth")

_BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class SessionContext:
    """Caller identity handed explicitly to every protected handler."""

    user_id: int
    email: str
    user_name: str
    workspace_id: int | None = None


@dataclass(frozen=True)
class RefreshResult:
    user: UserModel
    access_token: str
    refresh_token: str
    used_count: int


@dataclass(frozen=True)
class ResolvedSession:
    state: SessionState
    context: SessionContext
    access_token: str | None = None   # set only on REFRESH_SUCCESS
    refresh_token: str | None = None  # set only on REFRESH_SUCCESS


def parse_bearer(authorization: str | None) -> str:
    if not authorization or not authorization.startswith(_BEARER_PREFIX):
        raise MissingTokenError()
    token = authorization[len(_BEARER_PREFIX):].strip()
    if not token:
        raise MissingTokenError()
    return token


def parse_workspace_id(raw: str | None) -> int | None:
    """Optional X-Workspace-Id header; anything that isn't a non-negative int is ignored."""
    if raw is None:
        return None
    value = raw.strip()
    # ASCII only: str.isdigit() is also true for "\u00b2", which int() rejects
    if not (value.isascii() and value.isdigit()):
        return None
    return int(value)


class SessionResolver:
    def __init__(
        self,
        token_service: TokenService,
        user_repo: UserRepositoryProtocol | None = None,
    ) -> None:
        self._tokens = token_service
        self._users: UserRepositoryProtocol = user_repo or UserRepository()

    async def resolve(
        self,
        db: AsyncSession,
        authorization: str | None,
        refresh_token: str | None = None,
        device_id: str | None = None,
        workspace_id: str | None = None,
    ) -> ResolvedSession:
        token = parse_bearer(authorization)
        workspace = parse_workspace_id(workspace_id)

        try:
            claims = self._tokens.validate_access_token(token)
        except AccessTokenExpiredError:
            pass
        except InvalidAccessTokenError as exc:
            logger.info("Session rejected: %s (state=%s)", exc.message, SessionState.ACCESS_INVALID.value)
            raise
        else:
            user = await self._users.get_by_id(db, claims.user_id)
            if user is None:
                logger.info("Session rejected: user %s from access token no longer exists", claims.user_id)
                raise SessionUserNotFoundError()
            return ResolvedSession(
                state=SessionState.ACCESS_VALID,
                context=_context_for(user, workspace),
            )

        # Access token expired: try the refresh token the client sent along.
        if not refresh_token:
            logger.info("Session rejected: access token expired, no refresh token")
            raise RefreshTokenMissingError()

        try:
            result = await self.refresh(db, refresh_token, device_id)
        except AppError as exc:
            logger.info(
                "Session rejected: %s (state=%s)", exc.message, SessionState.REFRESH_FAILURE.value
            )
            raise

        return ResolvedSession(
            state=SessionState.REFRESH_SUCCESS,
            context=_context_for(result.user, workspace),
            access_token=result.access_token,
            refresh_token=result.refresh_token,
        )

    async def refresh(
        self,
        db: AsyncSession,
        refresh_token: str,
        device_id: str | None = None,
    ) -> RefreshResult:
        """Exchange a refresh token for a new access token.

        Shared by the transparent middleware path and POST /auth/refresh so
        both honour the same usage limit. The refresh token string is reused;
        only its counter (and device id, when given) changes.
        """
        try:
            record = await self._tokens.validate_refresh_token(db, refresh_token)
            user = await self._users.get_by_id(db, record.user_id)
            if user is None:
                raise SessionUserNotFoundError()
            access_token = self._tokens.issue_access_token(user.id, user.email)
            updated = await self._tokens.record_refresh_use(db, record, device_id)
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.warning("Refresh token update failed: %s", type(exc).__name__)
            raise RefreshPersistenceError() from exc
        except AppError:
            await db.rollback()
            raise

        logger.info(
            "Access token refreshed for user %s (refresh uses=%d/%d)",
            user.id,
            updated.used_count,
            self._tokens.config.refresh_usage_limit,
        )
        return RefreshResult(
            user=user,
            access_token=access_token,
            refresh_token=updated.token,
            used_count=updated.used_count,
        )


def _context_for(user: UserModel, workspace_id: int | None) -> SessionContext:
    return SessionContext(
        user_id=user.id,
        email=user.email,
        user_name=user.name,
        workspace_id=workspace_id,
    )
