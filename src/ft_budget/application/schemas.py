"""Pydantic schemas for the ft_budget API."""

from decimal import Decimal

from pydantic import Field

from src.ft_budget.infrastructure.db_models import BudgetORM
from src.ft_common.datetime_utils import MONTH_PATTERN
from src.ft_common.response import CamelModel


class CreateBudgetRequest(CamelModel):
    category_id: int
    month: str = Field(..., pattern=MONTH_PATTERN)
    amount: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2)


class CopyBudgetsRequest(CamelModel):
    from_month: str = Field(..., pattern=MONTH_PATTERN)
    to_month: str = Field(..., pattern=MONTH_PATTERN)


class BudgetItem(CamelModel):
    id: int
    category_id: int
    category_name: str
    month: str
    amount: float

    @classmethod
    def from_orm_row(cls, budget: BudgetORM) -> "BudgetItem":
        return cls(
            id=budget.id,
            category_id=budget.category_id,
            category_name=budget.category.name if budget.category is not None else "",
            month=budget.month,
            amount=float(budget.amount),
        )
