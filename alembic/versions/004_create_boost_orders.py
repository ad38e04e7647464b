"""004: create boost_orders table

Revision ID: 004
Revises: 003
Create Date: 2026-10-12
"""
from typing import Sequence, Union

from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE boost_orders (
            id              BIGSERIAL       PRIMARY KEY,
            order_id        VARCHAR(64)     NOT NULL,
            user_id         VARCHAR(64)     NOT NULL,
            listing_id      BIGINT          NOT NULL
                REFERENCES listings (id) ON DELETE CASCADE,
            amount          INT             NOT NULL,
            status          VARCHAR(16)     NOT NULL DEFAULT 'pending',
            boost_start     TIMESTAMPTZ,
            boost_end       TIMESTAMPTZ,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_boost_orders_order_id UNIQUE (order_id),
            CONSTRAINT ck_boost_orders_status
                CHECK (status IN ('pending', 'active', 'expired', 'cancelled')),
            CONSTRAINT ck_boost_orders_amount_non_negative CHECK (amount >= 0),
            CONSTRAINT ck_boost_orders_window
                CHECK (status = 'pending' OR status = 'cancelled'
                       OR (boost_start IS NOT NULL AND boost_end > boost_start))
        );
    """)
    # At most one pending-or-active order per listing
    op.execute("""
        CREATE UNIQUE INDEX uq_boost_orders_listing_open
            ON boost_orders (listing_id)
            WHERE status IN ('pending', 'active');
    """)
    op.execute(
        "CREATE INDEX idx_boost_orders_active_end ON boost_orders (status, boost_end);"
    )
    op.execute(
        "CREATE INDEX idx_boost_orders_user ON boost_orders (user_id, created_at DESC);"
    )
    op.execute("""
        CREATE TRIGGER trg_boost_orders_updated_at
            BEFORE UPDATE ON boost_orders
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE boost_orders IS 'Paid promotion ledger; boost status is derived from it on read';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS boost_orders CASCADE;")
