"""User persistence on top of the ORM mapping. Caller owns the transaction."""

from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.ft_auth.user.db_models import UserModel


class UserRepositoryProtocol(Protocol):
    async def get_by_id(self, db: AsyncSession, user_id: int) -> UserModel | None: ...

    async def get_by_email(self, db: AsyncSession, email: str) -> UserModel | None: ...

    async def email_taken(
        self, db: AsyncSession, email: str, exclude_user_id: int | None = None
    ) -> bool: ...

    async def add(self, db: AsyncSession, user: UserModel) -> UserModel: ...


class UserRepository:
    async def get_by_id(self, db: AsyncSession, user_id: int) -> UserModel | None:
        result = await db.execute(select(UserModel).where(UserModel.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, db: AsyncSession, email: str) -> UserModel | None:
        result = await db.execute(select(UserModel).where(UserModel.email == email))
        return result.scalar_one_or_none()

    async def email_taken(
        self, db: AsyncSession, email: str, exclude_user_id: int | None = None
    ) -> bool:
        stmt = select(UserModel.id).where(UserModel.email == email)
        if exclude_user_id is not None:
            stmt = stmt.where(UserModel.id != exclude_user_id)
        result = await db.execute(stmt)
        return result.first() is not None

    async def add(self, db: AsyncSession, user: UserModel) -> UserModel:
        db.add(user)
        await db.flush()  # Get user.id without committing
        await db.refresh(user)  # Load server defaults (currency, timestamps)
        return user
