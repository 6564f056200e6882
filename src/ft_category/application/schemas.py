"""Pydantic schemas for the ft_category API."""

from datetime import datetime

from pydantic import Field

from src.ft_category.infrastructure.db_models import CategoryORM
from src.ft_common.enums import CategoryType
from src.ft_common.response import CamelModel


class CreateCategoryRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=128)
    type: CategoryType


class UpdateCategoryRequest(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=128)
    type: CategoryType | None = None
    is_active: bool | None = None
    sequence: int | None = Field(None, ge=0)


class CategoryPosition(CamelModel):
    id: int
    sequence: int = Field(..., ge=0)


class ReorderCategoriesRequest(CamelModel):
    categories: list[CategoryPosition] = Field(..., min_length=1)


class CategoryItem(CamelModel):
    id: int
    name: str
    slug: str
    type: CategoryType
    is_active: bool
    sequence: int = 0
    created_at: datetime | None = None

    @classmethod
    def from_orm_row(cls, category: CategoryORM) -> "CategoryItem":
        return cls(
            id=category.id,
            name=category.name,
            slug=category.slug,
            type=CategoryType(category.type),
            is_active=category.is_active,
            sequence=category.sequence or 0,
            created_at=category.created_at,
        )
