"""Unit tests for repositories and the category service using a MagicMock AsyncSession."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from src.ft_auth.auth.refresh_store import RefreshTokenRepository
from src.ft_category.application.service import CategoryApplicationService
from src.ft_category.infrastructure.db_models import CategoryORM
from src.ft_category.infrastructure.persistence import (
    DEFAULT_EXPENSE_CATEGORIES,
    DEFAULT_INCOME_CATEGORIES,
    CategoryRepository,
)
from src.ft_common.enums import CategoryType
from src.ft_common.errors import CategoryExistsError, CategoryNotFoundError


def _refresh_row(**kwargs):
    row = MagicMock()
    row.id = 1
    row.user_id = kwargs.get("user_id", 7)
    row.token = kwargs.get("token", "tok")
    row.device_id = kwargs.get("device_id")
    row.used_count = kwargs.get("used_count", 0)
    row.expires_at = kwargs.get("expires_at", datetime(2030, 1, 1, tzinfo=UTC))
    return row


@pytest.fixture
def db():
    session = MagicMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


class TestRefreshTokenRepository:
    async def test_increment_returns_updated_record(self, db) -> None:
        result = MagicMock()
        result.fetchone.return_value = _refresh_row(used_count=4, device_id="phone")
        db.execute.return_value = result

        record = await RefreshTokenRepository().increment_usage(db, "tok", "phone", 30)

        assert record is not None
        assert record.used_count == 4
        params = db.execute.await_args.args[1]
        assert params == {"token": "tok", "device_id": "phone", "usage_limit": 30}

    async def test_increment_at_limit_returns_none(self, db) -> None:
        result = MagicMock()
        result.fetchone.return_value = None
        db.execute.return_value = result

        assert await RefreshTokenRepository().increment_usage(db, "tok", None, 30) is None

    async def test_naive_expiry_is_read_as_utc(self, db) -> None:
        result = MagicMock()
        result.fetchone.return_value = _refresh_row(expires_at=datetime(2030, 1, 1))
        db.execute.return_value = result

        record = await RefreshTokenRepository().create(
            db, user_id=7, token="tok", expires_at=datetime(2030, 1, 1, tzinfo=UTC)
        )

        assert record.expires_at.tzinfo is not None
        assert record.expires_at == datetime(2030, 1, 1, tzinfo=UTC)

    async def test_get_unknown_token(self, db) -> None:
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        db.execute.return_value = result

        assert await RefreshTokenRepository().get_by_token(db, "missing") is None


class TestCategoryRepository:
    async def test_create_suffixes_taken_slug(self, db) -> None:
        result = MagicMock()
        result.scalars.return_value.all.return_value = ["food-dining", "food-dining-1"]
        db.execute.return_value = result

        category = await CategoryRepository().create(db, 7, "Food & Dining", CategoryType.EXPENSE)

        assert category.slug == "food-dining-2"
        assert category.type == "expense"
        db.add.assert_called_once_with(category)
        db.flush.assert_awaited_once()

    async def test_seed_defaults(self, db) -> None:
        categories = await CategoryRepository().seed_defaults(db, 7)

        assert len(categories) == len(DEFAULT_EXPENSE_CATEGORIES) + len(DEFAULT_INCOME_CATEGORIES)
        assert {c.type for c in categories} == {"income", "expense"}
        assert len({c.slug for c in categories}) == len(categories)
        assert all(c.user_id == 7 for c in categories)
        db.add_all.assert_called_once()

    async def test_get_many_with_no_ids_skips_query(self, db) -> None:
        assert await CategoryRepository().get_many(db, 7, []) == []
        db.execute.assert_not_awaited()

    async def test_update_rename_excludes_own_slug(self, db) -> None:
        category = CategoryORM(
            id=3, user_id=7, name="Food", slug="food", type="expense", is_active=True, sequence=2
        )
        result = MagicMock()
        result.scalars.return_value.all.return_value = ["groceries"]
        db.execute.return_value = result

        updated = await CategoryRepository().update(db, category, name="Groceries", sequence=5)

        assert updated.slug == "groceries-1"
        assert updated.name == "Groceries"
        assert updated.sequence == 5
        assert updated.type == "expense"
        # the slug lookup must not count the row being renamed
        assert "categories.id !=" in str(db.execute.await_args.args[0])
        db.flush.assert_awaited_once()

    async def test_update_same_name_keeps_slug(self, db) -> None:
        category = CategoryORM(
            id=3, user_id=7, name="Food", slug="food", type="expense", is_active=True, sequence=0
        )
        updated = await CategoryRepository().update(db, category, name="Food", is_active=False)

        assert updated.slug == "food"
        assert updated.is_active is False
        db.execute.assert_not_awaited()

    async def test_reorder_counts_owned_rows_only(self, db) -> None:
        owned, foreign = MagicMock(), MagicMock()
        owned.first.return_value = (3,)
        foreign.first.return_value = None
        db.execute.side_effect = [owned, foreign]

        updated = await CategoryRepository().reorder(db, 7, [(3, 0), (99, 1)])

        assert updated == 1
        assert db.execute.await_count == 2


class TestCategoryService:
    async def test_delete_missing_raises_and_rolls_back(self, db) -> None:
        repo = AsyncMock()
        repo.delete.return_value = False
        service = CategoryApplicationService(repo=repo)

        with pytest.raises(CategoryNotFoundError):
            await service.delete_category(db, 7, 99)
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()

    async def test_delete_commits(self, db) -> None:
        repo = AsyncMock()
        repo.delete.return_value = True
        await CategoryApplicationService(repo=repo).delete_category(db, 7, 3)
        db.commit.assert_awaited_once()

    async def test_create_slug_race_is_conflict(self, db) -> None:
        repo = AsyncMock()
        repo.create.side_effect = IntegrityError("INSERT INTO categories", {}, Exception("dup"))
        service = CategoryApplicationService(repo=repo)

        with pytest.raises(CategoryExistsError) as exc_info:
            await service.create_category(db, 7, "Food", CategoryType.EXPENSE)
        assert exc_info.value.http_status == 409
        assert exc_info.value.code == 3002
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()

    async def test_update_slug_race_is_conflict(self, db) -> None:
        repo = AsyncMock()
        repo.get.return_value = MagicMock()
        repo.update.side_effect = IntegrityError("UPDATE categories", {}, Exception("dup"))
        service = CategoryApplicationService(repo=repo)

        with pytest.raises(CategoryExistsError):
            await service.update_category(db, 7, 3, name="Food")
        db.rollback.assert_awaited_once()

    async def test_update_missing_is_not_found(self, db) -> None:
        repo = AsyncMock()
        repo.get.return_value = None
        service = CategoryApplicationService(repo=repo)

        with pytest.raises(CategoryNotFoundError):
            await service.update_category(db, 7, 99, name="Food")
        repo.update.assert_not_awaited()
        db.rollback.assert_awaited_once()

    async def test_update_commits_and_returns_item(self, db) -> None:
        row = CategoryORM(
            id=3, user_id=7, name="Rent", slug="rent", type="expense", is_active=True, sequence=1
        )
        repo = AsyncMock()
        repo.get.return_value = row
        repo.update.return_value = row
        service = CategoryApplicationService(repo=repo)

        item = await service.update_category(db, 7, 3, sequence=1)

        assert item.to_wire()["sequence"] == 1
        repo.update.assert_awaited_once_with(
            db, row, name=None, category_type=None, is_active=None, sequence=1
        )
        db.commit.assert_awaited_once()

    async def test_reorder_commits(self, db) -> None:
        repo = AsyncMock()
        repo.reorder.return_value = 2
        service = CategoryApplicationService(repo=repo)

        assert await service.reorder_categories(db, 7, [(3, 0), (4, 1)]) == 2
        repo.reorder.assert_awaited_once_with(db, 7, [(3, 0), (4, 1)])
        db.commit.assert_awaited_once()
