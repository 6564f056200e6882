"""004: category sequence column and monthly budgets

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        ALTER TABLE categories
            ADD COLUMN sequence INTEGER NOT NULL DEFAULT 0;
    """)
    op.execute("""
        CREATE TABLE budgets (
            id           BIGSERIAL       PRIMARY KEY,
            user_id      BIGINT          NOT NULL REFERENCES users (id) ON DELETE CASCADE,
            category_id  BIGINT          NOT NULL REFERENCES categories (id) ON DELETE CASCADE,
            month        VARCHAR(7)      NOT NULL,
            amount       NUMERIC(15,2)   NOT NULL,
            created_at   TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at   TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_budgets_user_category_month UNIQUE (user_id, category_id, month),
            CONSTRAINT ck_budgets_month  CHECK (month ~ '^[0-9]{4}-(0[1-9]|1[0-2])$'),
            CONSTRAINT ck_budgets_amount CHECK (amount > 0)
        );
    """)
    op.execute("CREATE INDEX idx_budgets_user_month ON budgets (user_id, month);")
    op.execute("""
        CREATE TRIGGER trg_budgets_updated_at
            BEFORE UPDATE ON budgets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS budgets CASCADE;")
    op.execute("ALTER TABLE categories DROP COLUMN IF EXISTS sequence;")
