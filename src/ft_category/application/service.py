"""CategoryApplicationService: thin composition over CategoryRepository."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.ft_category.application.schemas import CategoryItem
from src.ft_category.infrastructure.persistence import CategoryRepository
from src.ft_common.enums import CategoryType
from src.ft_common.errors import CategoryExistsError, CategoryNotFoundError

logger = logging.getLogger("ft.category")


class CategoryApplicationService:
    def __init__(self, repo: CategoryRepository | None = None) -> None:
        self._repo = repo or CategoryRepository()

    async def list_categories(
        self, db: AsyncSession, user_id: int, category_type: CategoryType | None
    ) -> list[CategoryItem]:
        categories = await self._repo.list_for_user(db, user_id, category_type)
        return [CategoryItem.from_orm_row(c) for c in categories]

    async def create_category(
        self, db: AsyncSession, user_id: int, name: str, category_type: CategoryType
    ) -> CategoryItem:
        try:
            category = await self._repo.create(db, user_id, name, category_type)
            await db.commit()
        except IntegrityError:
            # A concurrent create took the same slug between the lookup and the insert
            await db.rollback()
            logger.info("Category slug race for user %s", user_id)
            raise CategoryExistsError() from None
        except Exception:
            await db.rollback()
            raise
        return CategoryItem.from_orm_row(category)

    async def update_category(
        self,
        db: AsyncSession,
        user_id: int,
        category_id: int,
        name: str | None = None,
        category_type: CategoryType | None = None,
        is_active: bool | None = None,
        sequence: int | None = None,
    ) -> CategoryItem:
        try:
            category = await self._repo.get(db, user_id, category_id)
            if category is None:
                raise CategoryNotFoundError(category_id)
            category = await self._repo.update(
                db,
                category,
                name=name,
                category_type=category_type,
                is_active=is_active,
                sequence=sequence,
            )
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.info("Category slug race for user %s", user_id)
            raise CategoryExistsError() from None
        except Exception:
            await db.rollback()
            raise
        return CategoryItem.from_orm_row(category)

    async def reorder_categories(
        self, db: AsyncSession, user_id: int, positions: list[tuple[int, int]]
    ) -> int:
        try:
            updated = await self._repo.reorder(db, user_id, positions)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return updated

    async def delete_category(self, db: AsyncSession, user_id: int, category_id: int) -> None:
        try:
            deleted = await self._repo.delete(db, user_id, category_id)
            if not deleted:
                raise CategoryNotFoundError(category_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
