"""Unit tests for monthly report shaping and LedgerReportService."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.ft_common.enums import EntryKind
from src.ft_ledger.application.service import LedgerReportService
from src.ft_ledger.domain import reports
from src.ft_ledger.domain.models import CategoryTotal


class TestMonthWindow:
    def test_initial_load_is_current_plus_three(self) -> None:
        assert reports.months_window(date(2024, 2, 17)) == [
            "2024-02",
            "2024-01",
            "2023-12",
            "2023-11",
        ]

    def test_before_loads_six_older_months(self) -> None:
        assert reports.months_window(date(2024, 2, 17), before="2023-11") == [
            "2023-10",
            "2023-09",
            "2023-08",
            "2023-07",
            "2023-06",
            "2023-05",
        ]

    def test_before_january_crosses_year(self) -> None:
        assert reports.months_window(date(2024, 6, 1), before="2024-01")[0] == "2023-12"

    @pytest.mark.parametrize(
        "month,expected",
        [
            ("2024-02", (date(2024, 2, 1), date(2024, 3, 1))),
            ("2023-12", (date(2023, 12, 1), date(2024, 1, 1))),
        ],
    )
    def test_month_bounds_half_open(self, month: str, expected: tuple[date, date]) -> None:
        assert reports.month_bounds(month) == expected

    def test_bad_month(self) -> None:
        with pytest.raises(ValueError):
            reports.parse_month("2024-13")


class TestMonthSummaries:
    def test_totals_and_day_flags(self) -> None:
        expense = {date(2024, 3, 1): Decimal("20"), date(2024, 3, 5): Decimal("10.50")}
        income = {date(2024, 3, 5): Decimal("100")}

        [march] = reports.build_month_summaries(["2024-03"], expense, income)

        assert march.expense_total == Decimal("30.50")
        assert march.net_total == Decimal("69.50")
        assert [d.day for d in march.days] == [date(2024, 3, 5), date(2024, 3, 1)]
        newest = march.days[0]
        assert newest.net == Decimal("89.50")
        assert (newest.income > 0, newest.expense > 0) == (True, True)
        assert march.days[1].income == Decimal(0)

    def test_empty_months_are_kept_in_order(self) -> None:
        expense = {date(2024, 1, 9): Decimal("5")}

        summaries = reports.build_month_summaries(["2024-02", "2024-01"], expense, {})

        assert [s.month for s in summaries] == ["2024-02", "2024-01"]
        assert summaries[0].days == []
        assert summaries[0].expense_total == Decimal(0)
        assert summaries[1].expense_total == Decimal("5")

    def test_days_outside_window_are_dropped(self) -> None:
        income = {date(2023, 12, 31): Decimal("1")}
        [jan] = reports.build_month_summaries(["2024-01"], {}, income)
        assert jan.days == []
        assert jan.net_total == Decimal(0)

    def test_merge_days_is_oldest_first(self) -> None:
        days = reports.merge_days(
            {date(2024, 3, 9): Decimal("4")}, {date(2024, 3, 2): Decimal("7")}
        )
        assert [(d.day.day, d.income, d.expense) for d in days] == [
            (2, Decimal("7"), Decimal(0)),
            (9, Decimal(0), Decimal("4")),
        ]


@pytest.fixture
def entry_repo() -> AsyncMock:
    repo = AsyncMock()

    async def _daily(db, kind, user_id, start, end):  # type: ignore[no-untyped-def]
        if kind == EntryKind.EXPENSE:
            return {date(2024, 3, 4): Decimal("12.00")}
        return {date(2024, 3, 4): Decimal("50.00"), date(2024, 1, 2): Decimal("8.00")}

    repo.daily_totals.side_effect = _daily
    repo.category_totals.return_value = [
        CategoryTotal(category_id=1, name="Food & Dining", total=Decimal("12.00"))
    ]
    repo.search.return_value = []
    return repo


class TestLedgerReportService:
    async def test_month_summaries_queries_whole_window(self, entry_repo: AsyncMock) -> None:
        service = LedgerReportService(repo=entry_repo)

        items = await service.month_summaries(AsyncMock(), 7, today=date(2024, 3, 20))

        assert [i.month for i in items] == ["2024-03", "2024-02", "2024-01", "2023-12"]
        calls = {c.args[1]: c.args[2:] for c in entry_repo.daily_totals.await_args_list}
        assert calls[EntryKind.EXPENSE] == (7, date(2023, 12, 1), date(2024, 4, 1))
        wire = items[0].to_wire()
        assert wire["total"] == 12.0
        assert wire["netTotal"] == 38.0
        assert wire["dates"] == [
            {"date": "2024-03-04", "total": 38.0, "hasIncome": True, "hasExpense": True}
        ]
        assert items[2].to_wire()["netTotal"] == 8.0

    async def test_month_details(self, entry_repo: AsyncMock) -> None:
        service = LedgerReportService(repo=entry_repo)

        details = await service.month_details(AsyncMock(), 7, "2024-03")

        wire = details.to_wire()
        assert wire["categories"] == [{"categoryId": 1, "category": "Food & Dining", "total": 12.0}]
        assert wire["daily"][-1] == {
            "date": "2024-03-04",
            "income": 50.0,
            "expense": 12.0,
            "netTotal": 38.0,
        }
        entry_repo.category_totals.assert_awaited_once()
        assert entry_repo.category_totals.await_args.args[1:] == (
            7,
            date(2024, 3, 1),
            date(2024, 4, 1),
        )

    async def test_search_is_expense_only(self, entry_repo: AsyncMock) -> None:
        db = AsyncMock()
        service = LedgerReportService(repo=entry_repo)

        assert await service.search_expenses(db, 7, "coffee", category_id=2) == []
        entry_repo.search.assert_awaited_once_with(
            db, EntryKind.EXPENSE, 7, "coffee", 2, None, None
        )
