"""Domain models for ft_ledger: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal


@dataclass
class Balance:
    user_id: int
    amount: Decimal
    notes: str = ""
    id: int | None = None
    updated_at: datetime | None = None


@dataclass
class LedgerEntry:
    """One income or expense row. ``kind`` says which table it came from."""

    id: int
    user_id: int
    kind: str                      # EntryKind value
    entry_date: date
    amount: Decimal                # always positive; the kind gives the sign
    notes: str = ""
    category_ids: list[int] = field(default_factory=list)
    created_at: datetime | None = None

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.kind == "income" else -self.amount


@dataclass
class DayTotals:
    day: date
    income: Decimal = Decimal(0)
    expense: Decimal = Decimal(0)

    @property
    def net(self) -> Decimal:
        return self.income - self.expense


@dataclass
class MonthSummary:
    month: str                     # YYYY-MM
    expense_total: Decimal
    net_total: Decimal
    days: list[DayTotals] = field(default_factory=list)   # newest first


@dataclass
class CategoryTotal:
    category_id: int
    name: str
    total: Decimal
