"""002: create orders table

Revision ID: 002
Revises: 001
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            id                  VARCHAR(36)     PRIMARY KEY,
            order_number        VARCHAR(32)     NOT NULL,
            user_id             VARCHAR(64),
            client_info         JSONB           NOT NULL,
            pickup_date         TIMESTAMPTZ,
            pickup_location     VARCHAR(16)     NOT NULL,
            delivery_type       VARCHAR(16)     NOT NULL,
            delivery_address    JSONB,
            items               JSONB           NOT NULL,
            subtotal            NUMERIC         NOT NULL,
            tax_amount          NUMERIC         NOT NULL,
            delivery_fee        NUMERIC         NOT NULL DEFAULT 0,
            total               NUMERIC         NOT NULL,
            deposit_amount      NUMERIC         NOT NULL,
            payment_type        VARCHAR(16)     NOT NULL,
            deposit_paid        BOOLEAN         NOT NULL DEFAULT FALSE,
            deposit_paid_at     TIMESTAMPTZ,
            balance_paid        BOOLEAN         NOT NULL DEFAULT FALSE,
            balance_paid_at     TIMESTAMPTZ,
            payment_status      VARCHAR(16)     NOT NULL DEFAULT 'unpaid',
            status              VARCHAR(20)     NOT NULL DEFAULT 'pending',
            notes               TEXT,
            payment_id          VARCHAR(128),
            invoice_id          VARCHAR(128),
            invoice_url         TEXT,
            version             INT             NOT NULL DEFAULT 0,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_orders_order_number       UNIQUE (order_number),
            CONSTRAINT ck_orders_items_not_empty    CHECK (jsonb_array_length(items) > 0),
            CONSTRAINT ck_orders_pickup_location    CHECK (pickup_location IN ('Montreal', 'Laval')),
            CONSTRAINT ck_orders_delivery_type      CHECK (delivery_type IN ('pickup', 'delivery')),
            CONSTRAINT ck_orders_address_iff_delivery CHECK (
                (delivery_type = 'delivery') = (delivery_address IS NOT NULL)
            ),
            CONSTRAINT ck_orders_money_gte_0        CHECK (
                subtotal >= 0 AND tax_amount >= 0 AND delivery_fee >= 0
                AND total >= 0 AND deposit_amount >= 0
            ),
            CONSTRAINT ck_orders_payment_type       CHECK (payment_type IN ('full', 'deposit', 'invoice')),
            CONSTRAINT ck_orders_balance_after_deposit CHECK (NOT balance_paid OR deposit_paid),
            CONSTRAINT ck_orders_payment_status     CHECK (
                payment_status IN ('unpaid', 'deposit_paid', 'paid')
            ),
            CONSTRAINT ck_orders_status             CHECK (
                status IN ('pending', 'confirmed', 'in_production', 'ready',
                           'completed', 'cancelled', 'delivered')
            ),
            CONSTRAINT ck_orders_version_gte_0      CHECK (version >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_orders_user_created ON orders (user_id, created_at DESC);")
    op.execute("CREATE INDEX idx_orders_status_created ON orders (status, created_at DESC);")
    op.execute("CREATE INDEX idx_orders_created ON orders (created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
