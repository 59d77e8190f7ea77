"""transaction kind

Revision ID: 0003_transaction_kind
Revises: 0002_user_auth
Create Date: 2026-10-19

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0003_transaction_kind"
down_revision = "0002_user_auth"
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Existing rows predate earnings, so they are all expenses.
    op.add_column(
        "transactions",
        sa.Column(
            "kind",
            sa.String(length=10),
            nullable=False,
            server_default=sa.text("'expense'"),
        ),
    )
    op.create_index("ix_transactions_kind", "transactions", ["kind"], unique=False)
    op.create_check_constraint(
        "ck_transactions_kind",
        "transactions",
        "kind IN ('expense', 'earning')",
    )


def downgrade() -> None:
    op.drop_constraint("ck_transactions_kind", "transactions", type_="check")
    op.drop_index("ix_transactions_kind", table_name="transactions")
    op.drop_column("transactions", "kind")
