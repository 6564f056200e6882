"""Ledger application services: a thin composition layer.

Every mutating call commits on success and rolls back on any exception.
The session resolver has usually opened a transaction on the same session
already, so these services never use `async with db.begin()`.
"""

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.ft_common.enums import EntryKind
from src.ft_common.datetime_utils import utc_now
from src.ft_common.errors import EntryNotFoundError
from src.ft_ledger.application.schemas import (
    BalanceResponse,
    CategoryTotalItem,
    DailySummaryItem,
    EntryItem,
    MonthDetails,
    MonthSummaryItem,
)
from src.ft_ledger.domain import reports
from src.ft_ledger.domain.repository import BalanceRepositoryProtocol, EntryRepositoryProtocol
from src.ft_ledger.infrastructure.persistence import BalanceRepository, EntryRepository

logger = logging.getLogger("ft.ledger")


class BalanceLedgerService:
    def __init__(self, repo: BalanceRepositoryProtocol | None = None) -> None:
        self._repo: BalanceRepositoryProtocol = repo or BalanceRepository()

    async def get_balance(self, db: AsyncSession, user_id: int) -> BalanceResponse:
        """Recompute income - expenses and store it; always returns the fresh value."""
        try:
            balance = await self._repo.recompute(db, user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return BalanceResponse.from_balance(balance)

    async def set_balance(
        self, db: AsyncSession, user_id: int, amount: Decimal, notes: str
    ) -> BalanceResponse:
        """Manual override. Lasts until the next get_balance recomputes it."""
        try:
            balance = await self._repo.upsert(db, user_id, amount, notes)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("User %s overrode balance", user_id)
        return BalanceResponse.from_balance(balance)


class EntryApplicationService:
    """CRUD for one entry kind (income or expense), scoped to the caller."""

    def __init__(self, kind: EntryKind, repo: EntryRepositoryProtocol | None = None) -> None:
        self._kind = kind
        self._repo: EntryRepositoryProtocol = repo or EntryRepository()

    async def create(
        self,
        db: AsyncSession,
        user_id: int,
        entry_date: date,
        amount: Decimal,
        notes: str,
        category_ids: list[int],
    ) -> EntryItem:
        try:
            entry = await self._repo.create(
                db, self._kind, user_id, entry_date, amount, notes, category_ids
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return EntryItem.from_entry(entry)

    async def list_by_date(
        self, db: AsyncSession, user_id: int, entry_date: date
    ) -> list[EntryItem]:
        entries = await self._repo.list_by_date(db, self._kind, user_id, entry_date)
        return [EntryItem.from_entry(e) for e in entries]

    async def update(
        self,
        db: AsyncSession,
        user_id: int,
        entry_id: int,
        entry_date: date | None = None,
        amount: Decimal | None = None,
        notes: str | None = None,
        category_ids: list[int] | None = None,
    ) -> EntryItem:
        try:
            entry = await self._repo.update(
                db, self._kind, user_id, entry_id, entry_date, amount, notes, category_ids
            )
            if entry is None:
                raise EntryNotFoundError(self._kind.value, entry_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return EntryItem.from_entry(entry)

    async def delete(self, db: AsyncSession, user_id: int, entry_id: int) -> None:
        try:
            deleted = await self._repo.delete(db, self._kind, user_id, entry_id)
            if not deleted:
                raise EntryNotFoundError(self._kind.value, entry_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise


class LedgerReportService:
    """Read-only monthly views across both entry kinds."""

    def __init__(self, repo: EntryRepositoryProtocol | None = None) -> None:
        self._repo: EntryRepositoryProtocol = repo or EntryRepository()

    async def _daily(
        self, db: AsyncSession, user_id: int, start: date, end: date
    ) -> tuple[dict[date, Decimal], dict[date, Decimal]]:
        expense = await self._repo.daily_totals(db, EntryKind.EXPENSE, user_id, start, end)
        income = await self._repo.daily_totals(db, EntryKind.INCOME, user_id, start, end)
        return expense, income

    async def month_summaries(
        self,
        db: AsyncSession,
        user_id: int,
        before: str | None = None,
        today: date | None = None,
    ) -> list[MonthSummaryItem]:
        """Current month and 3 back, or the 6 months before ``before``; newest first."""
        months = reports.months_window(today or utc_now().date(), before)
        start, _ = reports.month_bounds(months[-1])
        _, end = reports.month_bounds(months[0])
        expense, income = await self._daily(db, user_id, start, end)
        summaries = reports.build_month_summaries(months, expense, income)
        return [MonthSummaryItem.from_summary(s) for s in summaries]

    async def month_details(self, db: AsyncSession, user_id: int, month: str) -> MonthDetails:
        start, end = reports.month_bounds(month)
        expense, income = await self._daily(db, user_id, start, end)
        totals = await self._repo.category_totals(db, user_id, start, end)
        return MonthDetails(
            categories=[CategoryTotalItem.from_total(t) for t in totals],
            daily=[DailySummaryItem.from_day(d) for d in reports.merge_days(expense, income)],
        )

    async def search_expenses(
        self,
        db: AsyncSession,
        user_id: int,
        query: str = "",
        category_id: int | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[EntryItem]:
        entries = await self._repo.search(
            db, EntryKind.EXPENSE, user_id, query, category_id, date_from, date_to
        )
        return [EntryItem.from_entry(e) for e in entries]
