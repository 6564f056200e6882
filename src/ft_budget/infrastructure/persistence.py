"""BudgetRepository: per-category monthly spending limits.

One row per (user, category, month); the unique constraint is the final
guard against duplicates. Caller owns the transaction.
"""

from decimal import Decimal

from sqlalchemy import String, delete, func, literal, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from src.ft_budget.infrastructure.db_models import BudgetORM


class BudgetRepository:
    async def list_for_user(
        self, db: AsyncSession, user_id: int, month: str | None = None
    ) -> list[BudgetORM]:
        stmt = select(BudgetORM).where(BudgetORM.user_id == user_id)
        if month is not None:
            stmt = stmt.where(BudgetORM.month == month).order_by(BudgetORM.category_id)
        else:
            stmt = stmt.order_by(BudgetORM.month.desc(), BudgetORM.category_id)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def exists(self, db: AsyncSession, user_id: int, category_id: int, month: str) -> bool:
        result = await db.execute(
            select(BudgetORM.id).where(
                BudgetORM.user_id == user_id,
                BudgetORM.category_id == category_id,
                BudgetORM.month == month,
            )
        )
        return result.first() is not None

    async def create(
        self, db: AsyncSession, user_id: int, category_id: int, month: str, amount: Decimal
    ) -> BudgetORM:
        budget = BudgetORM(user_id=user_id, category_id=category_id, month=month, amount=amount)
        db.add(budget)
        await db.flush()
        await db.refresh(budget, attribute_names=["category", "created_at"])
        return budget

    async def copy_month(
        self, db: AsyncSession, user_id: int, from_month: str, to_month: str
    ) -> int:
        """Copy every budget of ``from_month`` into ``to_month`` in one statement.

        Categories that already have a budget in ``to_month`` keep it.
        Returns the number of rows inserted.
        """
        source = select(
            BudgetORM.user_id,
            BudgetORM.category_id,
            literal(to_month, type_=String(7)).label("month"),
            BudgetORM.amount,
        ).where(BudgetORM.user_id == user_id, BudgetORM.month == from_month)
        stmt = (
            pg_insert(BudgetORM)
            .from_select(["user_id", "category_id", "month", "amount"], source)
            .on_conflict_do_nothing(constraint="uq_budgets_user_category_month")
            .returning(BudgetORM.id)
        )
        result = await db.execute(stmt)
        return len(result.all())

    async def latest_month(self, db: AsyncSession, user_id: int) -> str | None:
        result = await db.execute(
            select(func.max(BudgetORM.month)).where(BudgetORM.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def delete_for_category(
        self, db: AsyncSession, user_id: int, category_id: int, month: str | None = None
    ) -> int:
        """Delete the category's budget for ``month``, or for every month when omitted."""
        stmt = delete(BudgetORM).where(
            BudgetORM.user_id == user_id, BudgetORM.category_id == category_id
        )
        if month is not None:
            stmt = stmt.where(BudgetORM.month == month)
        result = await db.execute(stmt.returning(BudgetORM.id))
        return len(result.all())
