"""User domain service: signup, login, profile, currency, password.

All DB operations use the injected AsyncSession. signup/login run inside
the router's `async with db.begin()`; profile mutations run after the
session resolver has already touched the session, so they commit/rollback
explicitly (same as the ledger services).
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.ft_auth.auth.password import hash_password, verify_password
from src.ft_auth.auth.token_service import TokenService
from src.ft_auth.user.db_models import UserModel
from src.ft_auth.user.repository import UserRepository, UserRepositoryProtocol
from src.ft_category.infrastructure.persistence import CategoryRepository
from src.ft_common.enums import Currency
from src.ft_common.errors import (
    EmailExistsError,
    IncorrectPasswordError,
    InvalidCredentialsError,
    UserNotFoundError,
)

logger = logging.getLogger("ft.auth")


class UserService:
    """Stateless; instantiate once and reuse across requests."""

    def __init__(
        self,
        token_service: TokenService,
        user_repo: UserRepositoryProtocol | None = None,
        category_repo: CategoryRepository | None = None,
    ) -> None:
        self._tokens = token_service
        self._users: UserRepositoryProtocol = user_repo or UserRepository()
        self._categories = category_repo or CategoryRepository()

    async def signup(
        self,
        name: str,
        email: str,
        password: str,
        db: AsyncSession,
        device_id: str | None = None,
    ) -> tuple[UserModel, str, str]:
        """Create the user, seed default categories, issue a token pair.

        The caller must wrap this in `async with db.begin()` so that a failure
        at any step leaves no user row behind.
        """
        if await self._users.email_taken(db, email):
            raise EmailExistsError()

        user = UserModel(name=name, email=email, password_hash=hash_password(password))
        try:
            user = await self._users.add(db, user)
        except IntegrityError:
            # Lost a race with a concurrent signup; the UNIQUE constraint is the final guard
            raise EmailExistsError() from None

        await self._categories.seed_defaults(db, user.id)

        access_token = self._tokens.issue_access_token(user.id, user.email)
        refresh_token = await self._tokens.issue_refresh_token(db, user.id, device_id)
        logger.info("User %s signed up", user.id)
        return user, access_token, refresh_token

    async def login(
        self,
        email: str,
        password: str,
        db: AsyncSession,
        device_id: str | None = None,
    ) -> tuple[UserModel, str, str]:
        """Authenticate and return (user, access_token, refresh_token).

        Unknown email and wrong password both raise InvalidCredentialsError
        so the endpoint cannot be used to enumerate accounts.
        """
        user = await self._users.get_by_email(db, email)
        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        access_token = self._tokens.issue_access_token(user.id, user.email)
        refresh_token = await self._tokens.issue_refresh_token(db, user.id, device_id)
        return user, access_token, refresh_token

    async def get_profile(self, db: AsyncSession, user_id: int) -> UserModel:
        user = await self._users.get_by_id(db, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def update_profile(
        self,
        db: AsyncSession,
        user_id: int,
        name: str | None,
        email: str | None,
    ) -> UserModel:
        try:
            user = await self.get_profile(db, user_id)
            if email is not None and email != user.email:
                if await self._users.email_taken(db, email, exclude_user_id=user_id):
                    raise EmailExistsError("Email already in use")
                user.email = email
            if name:
                user.name = name
            await db.flush()
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise EmailExistsError("Email already in use") from None
        except Exception:
            await db.rollback()
            raise
        return user

    async def update_currency(
        self, db: AsyncSession, user_id: int, currency: Currency
    ) -> UserModel:
        try:
            user = await self.get_profile(db, user_id)
            user.currency = currency.value
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return user

    async def change_password(
        self,
        db: AsyncSession,
        user_id: int,
        current_password: str,
        new_password: str,
    ) -> None:
        try:
            user = await self.get_profile(db, user_id)
            if not verify_password(current_password, user.password_hash):
                raise IncorrectPasswordError()
            user.password_hash = hash_password(new_password)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("User %s changed password", user_id)
