"""CategoryRepository: user-scoped category persistence.

Every query filters by user_id; a category id belonging to someone else is
indistinguishable from a missing one. Caller owns the transaction.
"""

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.ft_category.infrastructure.db_models import CategoryORM
from src.ft_common.enums import CategoryType
from src.ft_common.slug import generate_slug, unique_slug

DEFAULT_EXPENSE_CATEGORIES = (
    "Food & Dining",
    "Transportation",
    "Shopping",
    "Bills & Utilities",
    "Entertainment",
    "Subscriptions",
    "Other Expenses",
)

DEFAULT_INCOME_CATEGORIES = (
    "Salary",
    "Freelance",
    "Investment",
    "Other Income",
)


class CategoryRepository:
    async def list_for_user(
        self, db: AsyncSession, user_id: int, category_type: CategoryType | None = None
    ) -> list[CategoryORM]:
        stmt = select(CategoryORM).where(CategoryORM.user_id == user_id)
        if category_type is not None:
            stmt = stmt.where(CategoryORM.type == category_type.value)
        stmt = stmt.order_by(CategoryORM.type, CategoryORM.sequence, CategoryORM.name)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def get(self, db: AsyncSession, user_id: int, category_id: int) -> CategoryORM | None:
        result = await db.execute(
            select(CategoryORM).where(
                CategoryORM.id == category_id,
                CategoryORM.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_many(
        self, db: AsyncSession, user_id: int, category_ids: list[int]
    ) -> list[CategoryORM]:
        if not category_ids:
            return []
        result = await db.execute(
            select(CategoryORM).where(
                CategoryORM.user_id == user_id,
                CategoryORM.id.in_(category_ids),
            )
        )
        return list(result.scalars().all())

    async def _free_slug(
        self, db: AsyncSession, user_id: int, name: str, exclude_id: int | None = None
    ) -> str:
        base = generate_slug(name)
        stmt = select(CategoryORM.slug).where(
            CategoryORM.user_id == user_id,
            CategoryORM.slug.like(f"{base}%"),
        )
        if exclude_id is not None:
            stmt = stmt.where(CategoryORM.id != exclude_id)
        result = await db.execute(stmt)
        return unique_slug(base, set(result.scalars().all()))

    async def create(
        self, db: AsyncSession, user_id: int, name: str, category_type: CategoryType
    ) -> CategoryORM:
        category = CategoryORM(
            user_id=user_id,
            name=name,
            slug=await self._free_slug(db, user_id, name),
            type=category_type.value,
            is_active=True,
            sequence=0,
        )
        db.add(category)
        await db.flush()
        await db.refresh(category)
        return category

    async def update(
        self,
        db: AsyncSession,
        category: CategoryORM,
        name: str | None = None,
        category_type: CategoryType | None = None,
        is_active: bool | None = None,
        sequence: int | None = None,
    ) -> CategoryORM:
        """Apply the given fields. A new name gets a fresh slug; the row's own slug is not taken."""
        if name is not None and name != category.name:
            category.slug = await self._free_slug(
                db, category.user_id, name, exclude_id=category.id
            )
            category.name = name
        if category_type is not None:
            category.type = category_type.value
        if is_active is not None:
            category.is_active = is_active
        if sequence is not None:
            category.sequence = sequence
        await db.flush()
        await db.refresh(category)
        return category

    async def reorder(
        self, db: AsyncSession, user_id: int, positions: list[tuple[int, int]]
    ) -> int:
        """Set ``sequence`` for each ``(category_id, sequence)`` pair; ids the user
        doesn't own are skipped. Returns how many rows changed."""
        updated = 0
        for category_id, sequence in positions:
            result = await db.execute(
                update(CategoryORM)
                .where(CategoryORM.id == category_id, CategoryORM.user_id == user_id)
                .values(sequence=sequence)
                .returning(CategoryORM.id)
            )
            if result.first() is not None:
                updated += 1
        return updated

    async def delete(self, db: AsyncSession, user_id: int, category_id: int) -> bool:
        result = await db.execute(
            delete(CategoryORM)
            .where(CategoryORM.id == category_id, CategoryORM.user_id == user_id)
            .returning(CategoryORM.id)
        )
        return result.first() is not None

    async def seed_defaults(self, db: AsyncSession, user_id: int) -> list[CategoryORM]:
        """Insert the default income and expense categories for a new user."""
        categories = [
            CategoryORM(
                user_id=user_id,
                name=name,
                slug=generate_slug(name),
                type=category_type.value,
                is_active=True,
                sequence=position,
            )
            for category_type, names in (
                (CategoryType.EXPENSE, DEFAULT_EXPENSE_CATEGORIES),
                (CategoryType.INCOME, DEFAULT_INCOME_CATEGORIES),
            )
            for position, name in enumerate(names)
        ]
        db.add_all(categories)
        await db.flush()
        return categories
