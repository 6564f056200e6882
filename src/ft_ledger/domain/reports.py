"""Monthly report shaping: pure functions over per-day totals.

Repositories hand in ``{date: Decimal}`` maps; nothing here does I/O.
"""

from datetime import date, datetime
from decimal import Decimal

from src.ft_ledger.domain.models import DayTotals, MonthSummary

# Initial load shows the current month plus this many earlier ones
INITIAL_MONTHS_BACK = 3
# Each "load older" page
PAGE_MONTHS = 6


def parse_month(month: str) -> date:
    """``YYYY-MM`` -> first day of that month. Raises ValueError on bad input."""
    return datetime.strptime(month, "%Y-%m").date()


def shift_month(first: date, months: int) -> date:
    index = first.year * 12 + (first.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def month_bounds(month: str) -> tuple[date, date]:
    """Half-open ``[first day, first day of next month)``."""
    start = parse_month(month)
    return start, shift_month(start, 1)


def months_window(today: date, before: str | None = None) -> list[str]:
    """Months to report on, newest first.

    Without ``before``: the current month and the three before it.
    With ``before``: the six months immediately preceding it.
    """
    if before is None:
        newest = date(today.year, today.month, 1)
        count = INITIAL_MONTHS_BACK + 1
    else:
        newest = shift_month(parse_month(before), -1)
        count = PAGE_MONTHS
    return [month_key(shift_month(newest, -i)) for i in range(count)]


def merge_days(
    expense_daily: dict[date, Decimal], income_daily: dict[date, Decimal]
) -> list[DayTotals]:
    """Every day with at least one entry of either kind, oldest first."""
    return [
        DayTotals(
            day=day,
            income=income_daily.get(day, Decimal(0)),
            expense=expense_daily.get(day, Decimal(0)),
        )
        for day in sorted(set(expense_daily) | set(income_daily))
    ]


def build_month_summaries(
    months: list[str],
    expense_daily: dict[date, Decimal],
    income_daily: dict[date, Decimal],
) -> list[MonthSummary]:
    """One summary per month, in the order given; empty months are kept.

    ``expense_total`` counts expenses only, ``net_total`` is income minus
    expenses.
    """
    by_month: dict[str, list[DayTotals]] = {m: [] for m in months}
    for totals in merge_days(expense_daily, income_daily):
        bucket = by_month.get(month_key(totals.day))
        if bucket is not None:
            bucket.append(totals)

    summaries = []
    for month in months:
        days = list(reversed(by_month[month]))
        summaries.append(
            MonthSummary(
                month=month,
                expense_total=sum((d.expense for d in days), Decimal(0)),
                net_total=sum((d.net for d in days), Decimal(0)),
                days=days,
            )
        )
    return summaries
