"""003: create listings table

Revision ID: 003
Revises: 002
Create Date: 2026-10-12
"""
from typing import Sequence, Union

from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE listings (
            id              BIGSERIAL       PRIMARY KEY,
            make            VARCHAR(64)     NOT NULL,
            model           VARCHAR(64)     NOT NULL,
            year            INT             NOT NULL,
            price           BIGINT          NOT NULL,
            fuel_type       VARCHAR(32),
            description     TEXT            NOT NULL DEFAULT '',
            images          JSONB           NOT NULL DEFAULT '[]'::jsonb,
            seller_id       VARCHAR(64)     NOT NULL,
            seller_name     VARCHAR(128)    NOT NULL,
            location        VARCHAR(128)    NOT NULL DEFAULT 'Unknown',
            mileage         INT             NOT NULL DEFAULT 0,
            transmission    VARCHAR(32)     NOT NULL DEFAULT 'Unknown',
            color           VARCHAR(32)     NOT NULL DEFAULT 'Unknown',
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            expiration_date TIMESTAMPTZ     NOT NULL DEFAULT NOW() + INTERVAL '60 days',
            CONSTRAINT ck_listings_price_positive CHECK (price > 0),
            CONSTRAINT ck_listings_mileage_non_negative CHECK (mileage >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_listings_seller ON listings (seller_id);")
    op.execute(
        "CREATE INDEX idx_listings_expiration_created "
        "ON listings (expiration_date, created_at DESC);"
    )
    op.execute("""
        CREATE TRIGGER trg_listings_updated_at
            BEFORE UPDATE ON listings
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE listings IS 'Car listings shown in the marketplace until expiration_date';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS listings CASCADE;")
