"""Confirmed transactions table.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "confirmed_transactions",
        sa.Column("id", sa.String(length=255), primary_key=True),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=12), nullable=False),
        sa.Column("customer_email", sa.String(length=320), nullable=False),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "metadata",
            postgresql.JSONB(astext_type=sa.Text()).with_variant(sa.JSON(), "sqlite"),
            nullable=False,
        ),
    )
    op.create_index(
        "ix_confirmed_transactions_timestamp",
        "confirmed_transactions",
        ["timestamp"],
    )


def downgrade() -> None:
    op.drop_index(
        "ix_confirmed_transactions_timestamp", table_name="confirmed_transactions"
    )
    op.drop_table("confirmed_transactions")
