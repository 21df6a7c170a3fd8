from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from group_ledger.db.models import ExpenseRow, ExpenseShareRow, LedgerRow, ParticipantRow
from group_ledger.services.ledger import ExpenseRecord, Ledger

logger = logging.getLogger(__name__)


async def get_ledger_row(session: AsyncSession, *, name: str) -> Optional[LedgerRow]:
    return await session.scalar(select(LedgerRow).where(LedgerRow.name == name))


async def _delete_ledger_rows(session: AsyncSession, *, ledger_id: int) -> None:
    # Explicit deletes: SQLite does not enforce ON DELETE CASCADE without a pragma.
    expense_ids = select(ExpenseRow.id).where(ExpenseRow.ledger_id == ledger_id)
    await session.execute(delete(ExpenseShareRow).where(ExpenseShareRow.expense_id.in_(expense_ids)))
    await session.execute(delete(ExpenseRow).where(ExpenseRow.ledger_id == ledger_id))
    await session.execute(delete(ParticipantRow).where(ParticipantRow.ledger_id == ledger_id))
    await session.execute(delete(LedgerRow).where(LedgerRow.id == ledger_id))


async def save_ledger(session: AsyncSession, *, name: str, ledger: Ledger) -> LedgerRow:
    """Store ledger under name, replacing whatever was saved there before. Caller commits."""
    existing = await get_ledger_row(session, name=name)
    if existing is not None:
        await _delete_ledger_rows(session, ledger_id=existing.id)
        await session.flush()

    row = LedgerRow(
        name=name,
        participants=[ParticipantRow(position=i, name=p) for i, p in enumerate(ledger.participants)],
        expenses=[
            ExpenseRow(
                position=i,
                payer=r.payer,
                amount=r.amount,
                shares=[ExpenseShareRow(participant=p, share=s) for p, s in r.shares.items()],
            )
            for i, r in enumerate(ledger.records)
        ],
    )
    session.add(row)
    await session.flush()
    logger.info("Saved ledger %r: %d participant(s), %d expense(s)", name, len(ledger.participants), len(ledger))
    return row


async def load_ledger(session: AsyncSession, *, name: str) -> Optional[Ledger]:
    """
    Read a saved ledger back, or None if nothing is stored under name.

    Records are replayed through Ledger validation, so a tampered row raises
    the matching LedgerError instead of producing an inconsistent ledger.
    """
    row = await get_ledger_row(session, name=name)
    if row is None:
        return None

    participants = (
        await session.scalars(
            select(ParticipantRow.name)
            .where(ParticipantRow.ledger_id == row.id)
            .order_by(ParticipantRow.position.asc())
        )
    ).all()
    expenses = (
        await session.scalars(
            select(ExpenseRow)
            .where(ExpenseRow.ledger_id == row.id)
            .options(selectinload(ExpenseRow.shares))
            .order_by(ExpenseRow.position.asc())
            .execution_options(populate_existing=True)
        )
    ).all()

    records = [
        ExpenseRecord(
            payer=e.payer,
            amount=e.amount,
            shares={s.participant: s.share for s in e.shares},
        )
        for e in expenses
    ]
    ledger = Ledger.from_snapshot(participants, records)
    logger.info("Loaded ledger %r: %d participant(s), %d expense(s)", name, len(participants), len(records))
    return ledger


async def list_ledgers(session: AsyncSession) -> list[str]:
    res = await session.scalars(select(LedgerRow.name).order_by(LedgerRow.name.asc()))
    return list(res)


async def delete_ledger(session: AsyncSession, *, name: str) -> bool:
    row = await get_ledger_row(session, name=name)
    if row is None:
        return False
    await _delete_ledger_rows(session, ledger_id=row.id)
    logger.info("Deleted ledger %r", name)
    return True
