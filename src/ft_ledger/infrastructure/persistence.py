"""Ledger persistence: income/expense entries and the per-user balance row.

The balance row is a materialised cache of ``sum(income) - sum(expense)``.
Both writers use PostgreSQL ``INSERT ... ON CONFLICT (user_id) DO UPDATE``,
so there is never more than one row per user and concurrent readers never
see a half-written one. The recompute computes the two sums inside the same
statement, i.e. against a single snapshot.

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from src.ft_category.infrastructure.db_models import CategoryORM
from src.ft_category.infrastructure.persistence import CategoryRepository
from src.ft_common.enums import EntryKind
from src.ft_common.errors import InternalError, InvalidCategoryError
from src.ft_ledger.domain.models import Balance, CategoryTotal, LedgerEntry
from src.ft_ledger.infrastructure.db_models import (
    BalanceORM,
    ExpenseORM,
    IncomeORM,
    expense_categories,
)

_ENTRY_MODELS: dict[EntryKind, type[IncomeORM] | type[ExpenseORM]] = {
    EntryKind.INCOME: IncomeORM,
    EntryKind.EXPENSE: ExpenseORM,
}

_BALANCE_COLUMNS = (
    BalanceORM.id,
    BalanceORM.user_id,
    BalanceORM.amount,
    BalanceORM.notes,
    BalanceORM.updated_at,
)


def _row_to_balance(row: object) -> Balance:
    return Balance(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        amount=Decimal(row.amount),  # type: ignore[attr-defined]
        notes=row.notes or "",  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _orm_to_entry(kind: EntryKind, row: IncomeORM | ExpenseORM) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,
        user_id=row.user_id,
        kind=kind.value,
        entry_date=row.entry_date,
        amount=Decimal(row.amount),
        notes=row.notes or "",
        category_ids=sorted(c.id for c in row.categories),
        created_at=row.created_at,
    )


class BalanceRepository:
    async def recompute(self, db: AsyncSession, user_id: int) -> Balance:
        """Derive the balance from the entry tables and upsert it, in one statement.

        Existing notes are left untouched; only amount and updated_at change.
        """
        income_total = (
            select(func.coalesce(func.sum(IncomeORM.amount), 0))
            .where(IncomeORM.user_id == user_id)
            .scalar_subquery()
        )
        expense_total = (
            select(func.coalesce(func.sum(ExpenseORM.amount), 0))
            .where(ExpenseORM.user_id == user_id)
            .scalar_subquery()
        )
        stmt = pg_insert(BalanceORM).values(
            user_id=user_id,
            amount=income_total - expense_total,
            notes="",
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[BalanceORM.user_id],
            set_={"amount": stmt.excluded.amount, "updated_at": func.now()},
        ).returning(*_BALANCE_COLUMNS)

        result = await db.execute(stmt)
        row = result.fetchone()
        if row is None:
            raise InternalError("Balance upsert returned no rows")
        return _row_to_balance(row)

    async def upsert(
        self, db: AsyncSession, user_id: int, amount: Decimal, notes: str
    ) -> Balance:
        stmt = pg_insert(BalanceORM).values(user_id=user_id, amount=amount, notes=notes)
        stmt = stmt.on_conflict_do_update(
            index_elements=[BalanceORM.user_id],
            set_={
                "amount": stmt.excluded.amount,
                "notes": stmt.excluded.notes,
                "updated_at": func.now(),
            },
        ).returning(*_BALANCE_COLUMNS)

        result = await db.execute(stmt)
        row = result.fetchone()
        if row is None:
            raise InternalError("Balance upsert returned no rows")
        return _row_to_balance(row)


class EntryRepository:
    """Income and expense tables share one shape; ``kind`` picks the table."""

    def __init__(self, category_repo: CategoryRepository | None = None) -> None:
        self._categories = category_repo or CategoryRepository()

    async def _owned_categories(
        self, db: AsyncSession, user_id: int, category_ids: list[int]
    ) -> list[CategoryORM]:
        wanted = set(category_ids)
        categories = await self._categories.get_many(db, user_id, list(wanted))
        missing = wanted - {c.id for c in categories}
        if missing:
            raise InvalidCategoryError(f"Unknown category ids: {sorted(missing)}")
        return categories

    async def _get_owned(
        self, db: AsyncSession, kind: EntryKind, user_id: int, entry_id: int
    ) -> IncomeORM | ExpenseORM | None:
        model = _ENTRY_MODELS[kind]
        result = await db.execute(
            select(model).where(model.id == entry_id, model.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        db: AsyncSession,
        kind: EntryKind,
        user_id: int,
        entry_date: date,
        amount: Decimal,
        notes: str,
        category_ids: list[int],
    ) -> LedgerEntry:
        categories = await self._owned_categories(db, user_id, category_ids)
        row = _ENTRY_MODELS[kind](
            user_id=user_id,
            entry_date=entry_date,
            amount=amount,
            notes=notes,
            categories=categories,
        )
        db.add(row)
        await db.flush()
        await db.refresh(row, attribute_names=["created_at"])
        return _orm_to_entry(kind, row)

    async def list_by_date(
        self, db: AsyncSession, kind: EntryKind, user_id: int, entry_date: date
    ) -> list[LedgerEntry]:
        model = _ENTRY_MODELS[kind]
        result = await db.execute(
            select(model)
            .where(model.user_id == user_id, model.entry_date == entry_date)
            .order_by(model.id.desc())
        )
        return [_orm_to_entry(kind, row) for row in result.scalars().all()]

    async def update(
        self,
        db: AsyncSession,
        kind: EntryKind,
        user_id: int,
        entry_id: int,
        entry_date: date | None,
        amount: Decimal | None,
        notes: str | None,
        category_ids: list[int] | None,
    ) -> LedgerEntry | None:
        row = await self._get_owned(db, kind, user_id, entry_id)
        if row is None:
            return None
        if category_ids:
            row.categories = await self._owned_categories(db, user_id, category_ids)
        if entry_date is not None:
            row.entry_date = entry_date
        if amount is not None:
            row.amount = amount
        if notes is not None:
            row.notes = notes
        await db.flush()
        return _orm_to_entry(kind, row)

    async def delete(
        self, db: AsyncSession, kind: EntryKind, user_id: int, entry_id: int
    ) -> bool:
        model = _ENTRY_MODELS[kind]
        result = await db.execute(
            delete(model)
            .where(model.id == entry_id, model.user_id == user_id)
            .returning(model.id)
        )
        return result.first() is not None

    async def daily_totals(
        self, db: AsyncSession, kind: EntryKind, user_id: int, start: date, end: date
    ) -> dict[date, Decimal]:
        """Sum of amounts per day in ``[start, end)``."""
        model = _ENTRY_MODELS[kind]
        result = await db.execute(
            select(model.entry_date, func.sum(model.amount))
            .where(
                model.user_id == user_id,
                model.entry_date >= start,
                model.entry_date < end,
            )
            .group_by(model.entry_date)
        )
        return {day: Decimal(total) for day, total in result.all()}

    async def category_totals(
        self, db: AsyncSession, user_id: int, start: date, end: date
    ) -> list[CategoryTotal]:
        """Expense totals per category in ``[start, end)``.

        A multi-category expense counts in full towards each of its categories.
        """
        result = await db.execute(
            select(CategoryORM.id, CategoryORM.name, func.sum(ExpenseORM.amount))
            .join(expense_categories, expense_categories.c.category_id == CategoryORM.id)
            .join(ExpenseORM, ExpenseORM.id == expense_categories.c.expense_id)
            .where(
                ExpenseORM.user_id == user_id,
                ExpenseORM.entry_date >= start,
                ExpenseORM.entry_date < end,
            )
            .group_by(CategoryORM.id, CategoryORM.name)
            .order_by(func.sum(ExpenseORM.amount).desc(), CategoryORM.name)
        )
        return [
            CategoryTotal(category_id=cid, name=name, total=Decimal(total))
            for cid, name, total in result.all()
        ]

    async def search(
        self,
        db: AsyncSession,
        kind: EntryKind,
        user_id: int,
        query: str = "",
        category_id: int | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[LedgerEntry]:
        """Case-insensitive substring match on notes, with optional filters.

        ``date_from`` and ``date_to`` are both inclusive. Newest first.
        """
        model = _ENTRY_MODELS[kind]
        stmt = select(model).where(model.user_id == user_id)
        if query:
            stmt = stmt.where(model.notes.icontains(query, autoescape=True))
        if date_from is not None:
            stmt = stmt.where(model.entry_date >= date_from)
        if date_to is not None:
            stmt = stmt.where(model.entry_date <= date_to)
        if category_id is not None:
            stmt = stmt.where(model.categories.any(CategoryORM.id == category_id))
        result = await db.execute(stmt.order_by(model.entry_date.desc(), model.id.desc()))
        return [_orm_to_entry(kind, row) for row in result.scalars().all()]
