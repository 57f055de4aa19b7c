"""Create ledger tables

Revision ID: c7e1a9d04b21
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "c7e1a9d04b21"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create accounts, securities, prices, corporate actions, batches and transactions."""
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index("ix_accounts_id", "accounts", ["id"])

    op.create_table(
        "securities",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("isin", sa.String(20), nullable=True),
        sa.Column("symbol", sa.String(50), nullable=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("currency", sa.String(10), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("isin"),
    )
    op.create_index("ix_securities_id", "securities", ["id"])
    op.create_index("idx_securities_symbol", "securities", ["symbol"])
    op.create_index("idx_securities_isin", "securities", ["isin"])

    op.create_table(
        "security_prices",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column(
            "security_id",
            sa.Integer(),
            sa.ForeignKey("securities.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("price_date", sa.Date(), nullable=False),
        sa.Column("close_price", sa.Numeric(20, 8), nullable=False),
        sa.Column("source", sa.String(50), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("security_id", "price_date", name="uq_security_price_date"),
    )
    op.create_index("ix_security_prices_id", "security_prices", ["id"])
    op.create_index(
        "idx_security_prices_security_date", "security_prices", ["security_id", "price_date"]
    )

    op.create_table(
        "corporate_actions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column(
            "security_id",
            sa.Integer(),
            sa.ForeignKey("securities.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("action_date", sa.Date(), nullable=False),
        sa.Column("action_type", sa.String(50), nullable=False),  # SPLIT, BONUS, RIGHTS, ...
        sa.Column("ratio", sa.Numeric(15, 8), nullable=True),  # SPLIT: 2.0 for 2:1
        sa.Column("price", sa.Numeric(20, 8), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_corporate_actions_security", "corporate_actions", ["security_id"])
    op.create_index("idx_corporate_actions_date", "corporate_actions", ["action_date"])

    op.create_table(
        "import_batches",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("source", sa.String(50), nullable=False),
        sa.Column("row_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_import_batches_id", "import_batches", ["id"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("trade_date", sa.Date(), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("security_id", sa.Integer(), sa.ForeignKey("securities.id"), nullable=False),
        sa.Column("quantity", sa.Numeric(20, 8), nullable=False),
        sa.Column("price", sa.Numeric(20, 8), nullable=False),
        sa.Column("fees", sa.Numeric(20, 8), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "import_batch_id",
            sa.Integer(),
            sa.ForeignKey("import_batches.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("content_hash", sa.String(64), nullable=True),
        sa.Column("reverses_id", sa.Integer(), sa.ForeignKey("transactions.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("reverses_id"),
    )
    op.create_index("ix_transactions_id", "transactions", ["id"])
    op.create_index("idx_transactions_position", "transactions", ["account_id", "security_id"])
    op.create_index("idx_transactions_date", "transactions", ["trade_date"])
    op.create_index("idx_transactions_batch", "transactions", ["import_batch_id"])
    op.create_index("idx_transactions_content_hash", "transactions", ["content_hash"])


def downgrade() -> None:
    """Drop the ledger tables."""
    op.drop_table("transactions")
    op.drop_table("import_batches")
    op.drop_table("corporate_actions")
    op.drop_table("security_prices")
    op.drop_table("securities")
    op.drop_table("accounts")
