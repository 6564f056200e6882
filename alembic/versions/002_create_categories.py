"""002: create categories table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE categories (
            id          BIGSERIAL       PRIMARY KEY,
            user_id     BIGINT          NOT NULL REFERENCES users (id) ON DELETE CASCADE,
            name        VARCHAR(128)    NOT NULL,
            slug        VARCHAR(160)    NOT NULL,
            type        VARCHAR(10)     NOT NULL,
            is_active   BOOLEAN         NOT NULL DEFAULT TRUE,
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_categories_user_slug UNIQUE (user_id, slug),
            CONSTRAINT ck_categories_type      CHECK (type IN ('income', 'expense'))
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_categories_updated_at
            BEFORE UPDATE ON categories
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS categories CASCADE;")
