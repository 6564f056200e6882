"""003: create incomes, expenses, their category links, and balances

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_ENTRY_TABLES = ("incomes", "expenses")


def upgrade() -> None:
    for table in _ENTRY_TABLES:
        op.execute(f"""
            CREATE TABLE {table} (
                id          BIGSERIAL       PRIMARY KEY,
                user_id     BIGINT          NOT NULL REFERENCES users (id) ON DELETE CASCADE,
                date        DATE            NOT NULL,
                amount      NUMERIC(15, 2)  NOT NULL,
                notes       TEXT            NOT NULL DEFAULT '',
                created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
                updated_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
                CONSTRAINT ck_{table}_amount_positive CHECK (amount > 0)
            );
        """)
        op.execute(f"CREATE INDEX idx_{table}_user_date ON {table} (user_id, date);")
        op.execute(f"""
            CREATE TRIGGER trg_{table}_updated_at
                BEFORE UPDATE ON {table}
                FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
        """)

    op.execute("""
        CREATE TABLE income_categories (
            income_id   BIGINT NOT NULL REFERENCES incomes (id) ON DELETE CASCADE,
            category_id BIGINT NOT NULL REFERENCES categories (id) ON DELETE CASCADE,
            PRIMARY KEY (income_id, category_id)
        );
    """)
    op.execute("""
        CREATE TABLE expense_categories (
            expense_id  BIGINT NOT NULL REFERENCES expenses (id) ON DELETE CASCADE,
            category_id BIGINT NOT NULL REFERENCES categories (id) ON DELETE CASCADE,
            PRIMARY KEY (expense_id, category_id)
        );
    """)

    # One row per user: the unique constraint is the ON CONFLICT target
    op.execute("""
        CREATE TABLE balances (
            id          BIGSERIAL       PRIMARY KEY,
            user_id     BIGINT          NOT NULL REFERENCES users (id) ON DELETE CASCADE,
            amount      NUMERIC(15, 2)  NOT NULL DEFAULT 0,
            notes       TEXT            NOT NULL DEFAULT '',
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_balances_user_id UNIQUE (user_id)
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS balances CASCADE;")
    op.execute("DROP TABLE IF EXISTS expense_categories CASCADE;")
    op.execute("DROP TABLE IF EXISTS income_categories CASCADE;")
    for table in reversed(_ENTRY_TABLES):
        op.execute(f"DROP TABLE IF EXISTS {table} CASCADE;")
