"""Pydantic request/response schemas for ft_auth.

All responses are wrapped in ApiResponse at the router layer. Field names
are camelCase on the wire (see CamelModel).
"""

from datetime import datetime

from pydantic import EmailStr, Field

from src.ft_auth.user.db_models import UserModel
from src.ft_common.enums import Currency
from src.ft_common.response import CamelModel

# bcrypt only looks at the first 72 bytes and bcrypt>=4.1 refuses longer input
_PASSWORD_MAX = 72


class SignupRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=128)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=_PASSWORD_MAX)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=_PASSWORD_MAX)


class RefreshRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)
    device_id: str | None = Field(None, max_length=128)


class UpdateProfileRequest(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=128)
    email: EmailStr | None = None


class UpdateCurrencyRequest(CamelModel):
    currency: Currency


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1, max_length=_PASSWORD_MAX)
    new_password: str = Field(..., min_length=6, max_length=_PASSWORD_MAX)


class UserInfo(CamelModel):
    """User as exposed to clients. Never includes the password hash."""

    id: int
    name: str
    email: str
    currency: str
    first_signin_completed: bool
    created_at: datetime | None = None

    @classmethod
    def from_model(cls, user: UserModel) -> "UserInfo":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            currency=user.currency,
            first_signin_completed=user.first_signin_completed,
            created_at=user.created_at,
        )


class AuthResponse(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    user: UserInfo


class RefreshResponse(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
