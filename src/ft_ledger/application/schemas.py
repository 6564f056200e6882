"""Pydantic schemas for the ft_ledger API (income, expenses, balance, monthly reports)."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import Field

from src.ft_common.response import CamelModel
from src.ft_ledger.domain.models import (
    Balance,
    CategoryTotal,
    DayTotals,
    LedgerEntry,
    MonthSummary,
)

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateEntryRequest(CamelModel):
    category_ids: list[int] = Field(..., min_length=1, description="At least one category")
    entry_date: date = Field(..., alias="date", description="YYYY-MM-DD")
    amount: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2)
    notes: str = Field("", max_length=2000)


class UpdateEntryRequest(CamelModel):
    category_ids: list[int] | None = Field(None, min_length=1)
    entry_date: date | None = Field(None, alias="date")
    amount: Decimal | None = Field(None, gt=0, max_digits=15, decimal_places=2)
    notes: str | None = Field(None, max_length=2000)


class SetBalanceRequest(CamelModel):
    amount: Decimal = Field(..., max_digits=15, decimal_places=2)
    notes: str = Field("", max_length=2000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class EntryItem(CamelModel):
    id: int
    kind: str
    entry_date: date = Field(..., alias="date")
    amount: float
    notes: str
    category_ids: list[int]
    created_at: datetime | None = None

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> "EntryItem":
        return cls(
            id=entry.id,
            kind=entry.kind,
            entry_date=entry.entry_date,
            amount=float(entry.amount),
            notes=entry.notes,
            category_ids=entry.category_ids,
            created_at=entry.created_at,
        )


class BalanceResponse(CamelModel):
    user_id: int
    amount: float
    notes: str
    updated_at: datetime | None = None

    @classmethod
    def from_balance(cls, balance: Balance) -> "BalanceResponse":
        return cls(
            user_id=balance.user_id,
            amount=float(balance.amount),
            notes=balance.notes,
            updated_at=balance.updated_at,
        )


class DateTotalItem(CamelModel):
    """One day in a month summary; ``total`` is income minus expenses."""

    day: date = Field(..., alias="date")
    total: float
    has_income: bool
    has_expense: bool

    @classmethod
    def from_day(cls, day: DayTotals) -> "DateTotalItem":
        return cls(
            day=day.day,
            total=float(day.net),
            has_income=day.income > 0,
            has_expense=day.expense > 0,
        )


class MonthSummaryItem(CamelModel):
    month: str
    total: float          # expenses only
    net_total: float
    dates: list[DateTotalItem]

    @classmethod
    def from_summary(cls, summary: MonthSummary) -> "MonthSummaryItem":
        return cls(
            month=summary.month,
            total=float(summary.expense_total),
            net_total=float(summary.net_total),
            dates=[DateTotalItem.from_day(d) for d in summary.days],
        )


class CategoryTotalItem(CamelModel):
    category_id: int
    category: str
    total: float

    @classmethod
    def from_total(cls, total: CategoryTotal) -> "CategoryTotalItem":
        return cls(category_id=total.category_id, category=total.name, total=float(total.total))


class DailySummaryItem(CamelModel):
    day: date = Field(..., alias="date")
    income: float
    expense: float
    net_total: float

    @classmethod
    def from_day(cls, day: DayTotals) -> "DailySummaryItem":
        return cls(
            day=day.day,
            income=float(day.income),
            expense=float(day.expense),
            net_total=float(day.net),
        )


class MonthDetails(CamelModel):
    categories: list[CategoryTotalItem]
    daily: list[DailySummaryItem]
