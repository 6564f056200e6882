"""Token service: access tokens (signed JWT) and refresh tokens (opaque, stored).

Both kinds share one HS256 secret, supplied through ``TokenConfig`` at
construction. Nothing here reads the environment.

Access tokens are stateless: signature + ``exp`` decide validity. Their
claims are ``{userId, email, type: "access", exp}``.

Refresh tokens are random URL-safe strings persisted in ``refresh_tokens``
with an expiry and a usage counter. They are reused across refreshes (not
rotated); each use bumps ``used_count`` until the usage limit is reached.
"""

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, jwt
from jose.exceptions import JOSEError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import Settings
from src.ft_auth.auth.refresh_store import (
    RefreshTokenRecord,
    RefreshTokenRepository,
    RefreshTokenRepositoryProtocol,
)
from src.ft_common.datetime_utils import utc_now
from src.ft_common.errors import (
    AccessTokenExpiredError,
    InvalidAccessTokenError,
    RefreshTokenExpiredError,
    RefreshTokenNotFoundError,
    RefreshTokenUsageExceededError,
    TokenSigningError,
)

ACCESS_TOKEN_TYPE = "access"
_REFRESH_TOKEN_BYTES = 32


@dataclass(frozen=True)
class TokenConfig:
    secret: str
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(minutes=3)
    refresh_ttl: timedelta = timedelta(days=7)
    refresh_usage_limit: int = 30
    refresh_token_length: int = 32

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenConfig":
        return cls(
            secret=settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
            access_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
            refresh_usage_limit=settings.REFRESH_TOKEN_USAGE_LIMIT,
            refresh_token_length=settings.REFRESH_TOKEN_LENGTH,
        )


@dataclass(frozen=True)
class AccessClaims:
    user_id: int
    email: str
    expires_at: datetime


def generate_opaque_token(length: int) -> str:
    """Random URL-safe base64 string of exactly ``length`` characters."""
    return secrets.token_urlsafe(max(_REFRESH_TOKEN_BYTES, length))[:length]


class TokenService:
    """Holds only its config and the refresh repository."""

    def __init__(
        self,
        config: TokenConfig,
        refresh_repo: RefreshTokenRepositoryProtocol | None = None,
    ) -> None:
        self._config = config
        self._refresh_repo: RefreshTokenRepositoryProtocol = (
            refresh_repo or RefreshTokenRepository()
        )

    @property
    def config(self) -> TokenConfig:
        return self._config

    # ------------------------------------------------------------------
    # Access tokens
    # ------------------------------------------------------------------

    def issue_access_token(self, user_id: int, email: str) -> str:
        payload = {
            "userId": user_id,
            "email": email,
            "type": ACCESS_TOKEN_TYPE,
            "exp": utc_now() + self._config.access_ttl,
        }
        try:
            return str(
                jwt.encode(payload, self._config.secret, algorithm=self._config.algorithm)
            )
        except JOSEError as exc:
            # jose raises JWSError here for an unsupported algorithm
            raise TokenSigningError() from exc

    def validate_access_token(self, token: str) -> AccessClaims:
        """Verify signature, expiry and claim shape.

        Raises:
            AccessTokenExpiredError: signature is good but ``exp`` has passed.
            InvalidAccessTokenError: anything else (bad signature, algorithm,
                token type or userId).
        """
        try:
            payload = jwt.decode(
                token,
                self._config.secret,
                algorithms=[self._config.algorithm],  # Explicit list prevents algorithm confusion
                options={"require_exp": True},
            )
        except ExpiredSignatureError:
            raise AccessTokenExpiredError() from None
        except JOSEError:
            raise InvalidAccessTokenError() from None

        if payload.get("type") != ACCESS_TOKEN_TYPE:
            raise InvalidAccessTokenError("Invalid token type")

        raw_user_id = payload.get("userId")
        # bool is an int subclass; reject it along with non-integral floats
        if isinstance(raw_user_id, bool) or not isinstance(raw_user_id, (int, float)):
            raise InvalidAccessTokenError("Invalid user ID in token")
        if isinstance(raw_user_id, float) and not raw_user_id.is_integer():
            raise InvalidAccessTokenError("Invalid user ID in token")

        email = payload.get("email", "")
        if not isinstance(email, str):
            raise InvalidAccessTokenError("Invalid token claims")

        return AccessClaims(
            user_id=int(raw_user_id),
            email=email,
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )

    # ------------------------------------------------------------------
    # Refresh tokens
    # ------------------------------------------------------------------

    async def issue_refresh_token(
        self, db: AsyncSession, user_id: int, device_id: str | None = None
    ) -> str:
        """Create and persist a refresh token. Caller commits."""
        token = generate_opaque_token(self._config.refresh_token_length)
        await self._refresh_repo.create(
            db,
            user_id=user_id,
            token=token,
            expires_at=utc_now() + self._config.refresh_ttl,
            device_id=device_id,
        )
        return token

    async def validate_refresh_token(self, db: AsyncSession, token: str) -> RefreshTokenRecord:
        """Look up a refresh token and check it can still be honoured.

        The usage limit is checked before expiry: an exhausted token is
        reported as exhausted whatever its expiry.
        """
        record = await self._refresh_repo.get_by_token(db, token)
        if record is None:
            raise RefreshTokenNotFoundError()
        if record.used_count >= self._config.refresh_usage_limit:
            raise RefreshTokenUsageExceededError()
        if utc_now() > record.expires_at:
            raise RefreshTokenExpiredError()
        return record

    async def record_refresh_use(
        self, db: AsyncSession, record: RefreshTokenRecord, device_id: str | None = None
    ) -> RefreshTokenRecord:
        """Increment ``used_count`` (and set ``device_id`` when given). Caller commits."""
        updated = await self._refresh_repo.increment_usage(
            db,
            token=record.token,
            device_id=device_id or None,
            usage_limit=self._config.refresh_usage_limit,
        )
        if updated is None:
            raise RefreshTokenUsageExceededError()
        return updated
