"""Repository Protocols: dependency inversion for testability.

Unit tests inject mocks that conform to these Protocols.
Infrastructure layer provides the real implementations.
"""

from datetime import date
from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.ft_common.enums import EntryKind
from src.ft_ledger.domain.models import Balance, CategoryTotal, LedgerEntry


class BalanceRepositoryProtocol(Protocol):
    async def recompute(self, db: AsyncSession, user_id: int) -> Balance: ...

    async def upsert(
        self, db: AsyncSession, user_id: int, amount: Decimal, notes: str
    ) -> Balance: ...


class EntryRepositoryProtocol(Protocol):
    async def create(
        self,
        db: AsyncSession,
        kind: EntryKind,
        user_id: int,
        entry_date: date,
        amount: Decimal,
        notes: str,
        category_ids: list[int],
    ) -> LedgerEntry: ...

    async def list_by_date(
        self, db: AsyncSession, kind: EntryKind, user_id: int, entry_date: date
    ) -> list[LedgerEntry]: ...

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
    ) -> LedgerEntry | None: ...

    async def delete(
        self, db: AsyncSession, kind: EntryKind, user_id: int, entry_id: int
    ) -> bool: ...

    async def daily_totals(
        self, db: AsyncSession, kind: EntryKind, user_id: int, start: date, end: date
    ) -> dict[date, Decimal]: ...

    async def category_totals(
        self, db: AsyncSession, user_id: int, start: date, end: date
    ) -> list[CategoryTotal]: ...

    async def search(
        self,
        db: AsyncSession,
        kind: EntryKind,
        user_id: int,
        query: str = "",
        category_id: int | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[LedgerEntry]: ...
