from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

import sqlalchemy as sa
from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator, TypeEngine

from group_ledger.services.money import MAX_INTEGER_DIGITS, MAX_SCALE


# Portable across PostgreSQL and SQLite.
UTC_NOW = sa.func.current_timestamp()

MONEY_PRECISION = MAX_INTEGER_DIGITS + MAX_SCALE


class Money(TypeDecorator):
    """
    Exact Decimal column.

    NUMERIC on PostgreSQL. SQLite would round NUMERIC through a binary float,
    so there the value is kept as its decimal string.
    """

    impl = Numeric(MONEY_PRECISION, MAX_SCALE)
    cache_ok = True

    def load_dialect_impl(self, dialect: Dialect) -> TypeEngine[Any]:
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(MONEY_PRECISION + 2))
        return dialect.type_descriptor(Numeric(MONEY_PRECISION, MAX_SCALE, asdecimal=True))

    def process_bind_param(self, value: Optional[Decimal], dialect: Dialect) -> Any:
        if value is None:
            return None
        return str(value) if dialect.name == "sqlite" else value

    def process_result_value(self, value: Any, dialect: Dialect) -> Optional[Decimal]:
        if value is None:
            return None
        return value if isinstance(value, Decimal) else Decimal(str(value))


MONEY = Money()


class Base(DeclarativeBase):
    pass


class LedgerRow(Base):
    __tablename__ = "ledgers"
    __table_args__ = (UniqueConstraint("name", name="uq_ledgers_name"),)

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=UTC_NOW, nullable=False)

    participants: Mapped[list[ParticipantRow]] = relationship(
        back_populates="ledger",
        cascade="all, delete-orphan",
        order_by="ParticipantRow.position",
    )
    expenses: Mapped[list[ExpenseRow]] = relationship(
        back_populates="ledger",
        cascade="all, delete-orphan",
        order_by="ExpenseRow.position",
    )


class ParticipantRow(Base):
    __tablename__ = "participants"
    __table_args__ = (
        UniqueConstraint("ledger_id", "name", name="uq_participants_ledger_name"),
        Index("ix_participants_ledger_id", "ledger_id"),
    )

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    ledger_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("ledgers.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Registration order within the ledger.
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    ledger: Mapped[LedgerRow] = relationship(back_populates="participants")


class ExpenseRow(Base):
    __tablename__ = "expenses"
    __table_args__ = (
        UniqueConstraint("ledger_id", "position", name="uq_expenses_ledger_position"),
        Index("ix_expenses_ledger_id", "ledger_id"),
    )

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    ledger_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("ledgers.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    # Participant names are stored as-is; they are opaque ids, not foreign keys.
    payer: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    ledger: Mapped[LedgerRow] = relationship(back_populates="expenses")
    shares: Mapped[list[ExpenseShareRow]] = relationship(
        back_populates="expense",
        cascade="all, delete-orphan",
        order_by="ExpenseShareRow.id",
    )


class ExpenseShareRow(Base):
    __tablename__ = "expense_shares"
    __table_args__ = (
        UniqueConstraint("expense_id", "participant", name="uq_expense_share_participant"),
        Index("ix_expense_shares_expense_id", "expense_id"),
    )

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    expense_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("expenses.id", ondelete="CASCADE"),
        nullable=False,
    )
    participant: Mapped[str] = mapped_column(String(255), nullable=False)
    share: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    expense: Mapped[ExpenseRow] = relationship(back_populates="shares")
