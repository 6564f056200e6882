"""001: timestamp trigger function, users, refresh_tokens

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_update_timestamp()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TABLE users (
            id                      BIGSERIAL       PRIMARY KEY,
            name                    VARCHAR(128)    NOT NULL,
            email                   VARCHAR(255)    NOT NULL,
            password_hash           VARCHAR(255)    NOT NULL,
            currency                VARCHAR(3)      NOT NULL DEFAULT 'IDR',
            first_signin_completed  BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_users_email       UNIQUE (email),
            CONSTRAINT ck_users_currency    CHECK (currency IN ('IDR', 'USD', 'EUR', 'JPY'))
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_users_updated_at
            BEFORE UPDATE ON users
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE TABLE refresh_tokens (
            id          BIGSERIAL       PRIMARY KEY,
            user_id     BIGINT          NOT NULL REFERENCES users (id) ON DELETE CASCADE,
            token       VARCHAR(64)     NOT NULL,
            device_id   VARCHAR(128),
            used_count  INTEGER         NOT NULL DEFAULT 0,
            expires_at  TIMESTAMPTZ     NOT NULL,
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_refresh_tokens_token      UNIQUE (token),
            CONSTRAINT ck_refresh_tokens_used_count CHECK (used_count >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_refresh_tokens_user_id ON refresh_tokens (user_id);")
    op.execute("""
        CREATE TRIGGER trg_refresh_tokens_updated_at
            BEFORE UPDATE ON refresh_tokens
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS refresh_tokens CASCADE;")
    op.execute("DROP TABLE IF EXISTS users CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
