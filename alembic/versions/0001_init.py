"""init tables

Revision ID: 0001_init
Revises:
Create Date: 2026-10-19

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


UTC_NOW = sa.func.current_timestamp()
ID = sa.BigInteger().with_variant(sa.Integer(), "sqlite")
# Matches group_ledger.db.models.Money: exact decimal text on SQLite.
MONEY = sa.Numeric(24, 9).with_variant(sa.String(26), "sqlite")


def upgrade() -> None:
    op.create_table(
        "ledgers",
        sa.Column("id", ID, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=UTC_NOW, nullable=False),
        sa.UniqueConstraint("name", name="uq_ledgers_name"),
    )

    op.create_table(
        "participants",
        sa.Column("id", ID, primary_key=True, autoincrement=True),
        sa.Column("ledger_id", sa.BigInteger(), sa.ForeignKey("ledgers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.UniqueConstraint("ledger_id", "name", name="uq_participants_ledger_name"),
    )
    op.create_index("ix_participants_ledger_id", "participants", ["ledger_id"])

    op.create_table(
        "expenses",
        sa.Column("id", ID, primary_key=True, autoincrement=True),
        sa.Column("ledger_id", sa.BigInteger(), sa.ForeignKey("ledgers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("payer", sa.String(length=255), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.UniqueConstraint("ledger_id", "position", name="uq_expenses_ledger_position"),
    )
    op.create_index("ix_expenses_ledger_id", "expenses", ["ledger_id"])

    op.create_table(
        "expense_shares",
        sa.Column("id", ID, primary_key=True, autoincrement=True),
        sa.Column(
            "expense_id",
            sa.BigInteger(),
            sa.ForeignKey("expenses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("participant", sa.String(length=255), nullable=False),
        sa.Column("share", MONEY, nullable=False),
        sa.UniqueConstraint("expense_id", "participant", name="uq_expense_share_participant"),
    )
    op.create_index("ix_expense_shares_expense_id", "expense_shares", ["expense_id"])


def downgrade() -> None:
    op.drop_index("ix_expense_shares_expense_id", table_name="expense_shares")
    op.drop_table("expense_shares")

    op.drop_index("ix_expenses_ledger_id", table_name="expenses")
    op.drop_table("expenses")

    op.drop_index("ix_participants_ledger_id", table_name="participants")
    op.drop_table("participants")

    op.drop_table("ledgers")
