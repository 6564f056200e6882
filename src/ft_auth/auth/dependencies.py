"""FastAPI dependencies: get_session and the shared auth singletons.

Usage in any protected router:
    from src.ft_auth.auth.dependencies import get_session

    @router.get("/protected")
    async def protected(session: SessionContext = Depends(get_session)):
        ...
"""

from typing import Annotated

from fastapi import Depends, Header, Response
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.ft_auth.auth.session import SessionContext, SessionResolver
from src.ft_auth.auth.token_service import TokenConfig, TokenService
from src.ft_common.database import get_db_session

_token_service = TokenService(TokenConfig.from_settings(settings))
_session_resolver = SessionResolver(_token_service)


def get_token_service() -> TokenService:
    return _token_service


def get_session_resolver() -> SessionResolver:
    return _session_resolver


async def get_session(
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    resolver: Annotated[SessionResolver, Depends(get_session_resolver)],
    authorization: Annotated[str | None, Header()] = None,
    x_refresh_token: Annotated[str | None, Header()] = None,
    x_device_id: Annotated[str | None, Header()] = None,
    x_workspace_id: Annotated[str | None, Header()] = None,
) -> SessionContext:
    """Resolve the caller's session; raises 401 (AppError) on any failure.

    When the access token had expired and was refreshed, the new access token
    and the refresh token are copied onto the response as X-Token and
    X-Refresh-Token. FastAPI merges these headers into whatever the handler
    returns, as long as the handler does not return a Response itself.
    """
    resolved = await resolver.resolve(
        db,
        authorization=authorization,
        refresh_token=x_refresh_token,
        device_id=x_device_id,
        workspace_id=x_workspace_id,
    )
    if resolved.access_token is not None and resolved.refresh_token is not None:
        response.headers["X-Token"] = resolved.access_token
        response.headers["X-Refresh-Token"] = resolved.refresh_token
    return resolved.context
