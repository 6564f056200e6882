"""BudgetApplicationService: monthly per-category budgets.

Same transaction rule as the ledger services: commit on success, roll back
on any exception.
"""

import logging
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.ft_budget.application.schemas import BudgetItem
from src.ft_budget.infrastructure.persistence import BudgetRepository
from src.ft_category.infrastructure.persistence import CategoryRepository
from src.ft_common.errors import (
    BadRequestError,
    BudgetExistsError,
    BudgetNotFoundError,
    InvalidCategoryError,
)

logger = logging.getLogger("ft.budget")


class BudgetApplicationService:
    def __init__(
        self,
        repo: BudgetRepository | None = None,
        category_repo: CategoryRepository | None = None,
    ) -> None:
        self._repo = repo or BudgetRepository()
        self._categories = category_repo or CategoryRepository()

    async def list_budgets(
        self, db: AsyncSession, user_id: int, month: str | None = None
    ) -> list[BudgetItem]:
        budgets = await self._repo.list_for_user(db, user_id, month)
        return [BudgetItem.from_orm_row(b) for b in budgets]

    async def create_budget(
        self, db: AsyncSession, user_id: int, category_id: int, month: str, amount: Decimal
    ) -> BudgetItem:
        try:
            if await self._categories.get(db, user_id, category_id) is None:
                raise InvalidCategoryError(f"Unknown category ids: [{category_id}]")
            if await self._repo.exists(db, user_id, category_id, month):
                raise BudgetExistsError(category_id, month)
            budget = await self._repo.create(db, user_id, category_id, month, amount)
            await db.commit()
        except IntegrityError:
            # Lost a race with a concurrent create for the same month
            await db.rollback()
            raise BudgetExistsError(category_id, month) from None
        except Exception:
            await db.rollback()
            raise
        return BudgetItem.from_orm_row(budget)

    async def copy_budgets(
        self, db: AsyncSession, user_id: int, from_month: str, to_month: str
    ) -> int:
        if from_month == to_month:
            raise BadRequestError("fromMonth and toMonth must differ")
        try:
            copied = await self._repo.copy_month(db, user_id, from_month, to_month)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("User %s copied %d budgets %s -> %s", user_id, copied, from_month, to_month)
        return copied

    async def latest_month(self, db: AsyncSession, user_id: int) -> str | None:
        return await self._repo.latest_month(db, user_id)

    async def delete_budget(
        self, db: AsyncSession, user_id: int, category_id: int, month: str | None = None
    ) -> None:
        try:
            deleted = await self._repo.delete_for_category(db, user_id, category_id, month)
            if not deleted:
                raise BudgetNotFoundError(category_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
