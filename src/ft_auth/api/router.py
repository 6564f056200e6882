"""Auth API router: signup, login, refresh, profile.

All endpoints return ApiResponse. request_id is read from request.state
(injected by RequestLogMiddleware).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.ft_auth.auth.dependencies import (
    get_session,
    get_session_resolver,
    get_token_service,
)
from src.ft_auth.auth.session import SessionContext, SessionResolver
from src.ft_auth.auth.token_service import TokenService
from src.ft_auth.user.schemas import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    RefreshRequest,
    RefreshResponse,
    SignupRequest,
    UpdateCurrencyRequest,
    UpdateProfileRequest,
    UserInfo,
)
from src.ft_auth.user.service import UserService
from src.ft_common.database import get_db_session
from src.ft_common.response import ApiResponse, success_response

router = APIRouter(prefix="/auth", tags=["auth"])
_service = UserService(get_token_service())


def _get_request_id(request: Request) -> str:
    """Read request_id injected by RequestLogMiddleware, fallback if absent."""
    return getattr(request.state, "request_id", "req_unknown")


def _expires_in(tokens: TokenService) -> int:
    return int(tokens.config.access_ttl.total_seconds())


@router.post(
    "/signup",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    summary="User signup",
)
async def signup(
    request: Request,
    body: SignupRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    x_device_id: Annotated[str | None, Header()] = None,
) -> ApiResponse:
    async with db.begin():
        user, access_token, refresh_token = await _service.signup(
            body.name, body.email, body.password, db, device_id=x_device_id
        )

    data = AuthResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=_expires_in(tokens),
        user=UserInfo.from_model(user),
    )
    resp = success_response(data.to_wire(), message="User registered successfully")
    resp.request_id = _get_request_id(request)
    return resp


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="User login",
)
async def login(
    request: Request,
    body: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    x_device_id: Annotated[str | None, Header()] = None,
) -> ApiResponse:
    async with db.begin():
        user, access_token, refresh_token = await _service.login(
            body.email, body.password, db, device_id=x_device_id
        )

    data = AuthResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=_expires_in(tokens),
        user=UserInfo.from_model(user),
    )
    resp = success_response(data.to_wire(), message="Login successful")
    resp.request_id = _get_request_id(request)
    return resp


@router.post(
    "/refresh",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Exchange a refresh token for a new access token",
)
async def refresh_token(
    request: Request,
    body: RefreshRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    resolver: Annotated[SessionResolver, Depends(get_session_resolver)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    x_device_id: Annotated[str | None, Header()] = None,
) -> ApiResponse:
    result = await resolver.refresh(db, body.refresh_token, body.device_id or x_device_id)

    data = RefreshResponse(
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        expires_in=_expires_in(tokens),
    )
    resp = success_response(data.to_wire(), message="Token refreshed")
    resp.request_id = _get_request_id(request)
    return resp


@router.get("/profile", response_model=ApiResponse, summary="Current user profile")
async def get_profile(
    request: Request,
    session: Annotated[SessionContext, Depends(get_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    user = await _service.get_profile(db, session.user_id)
    resp = success_response(UserInfo.from_model(user).to_wire())
    resp.request_id = _get_request_id(request)
    return resp


@router.put("/profile", response_model=ApiResponse, summary="Update name / email")
async def update_profile(
    request: Request,
    body: UpdateProfileRequest,
    session: Annotated[SessionContext, Depends(get_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    user = await _service.update_profile(db, session.user_id, body.name, body.email)
    resp = success_response(UserInfo.from_model(user).to_wire(), message="Profile updated")
    resp.request_id = _get_request_id(request)
    return resp


@router.put("/currency", response_model=ApiResponse, summary="Update display currency")
async def update_currency(
    request: Request,
    body: UpdateCurrencyRequest,
    session: Annotated[SessionContext, Depends(get_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    user = await _service.update_currency(db, session.user_id, body.currency)
    resp = success_response(UserInfo.from_model(user).to_wire(), message="Currency updated")
    resp.request_id = _get_request_id(request)
    return resp


@router.put("/password", response_model=ApiResponse, summary="Change password")
async def change_password(
    request: Request,
    body: ChangePasswordRequest,
    session: Annotated[SessionContext, Depends(get_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    await _service.change_password(
        db, session.user_id, body.current_password, body.new_password
    )
    resp = success_response(message="Password updated successfully")
    resp.request_id = _get_request_id(request)
    return resp
