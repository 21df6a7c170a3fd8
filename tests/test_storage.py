from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import update

from group_ledger.db.models import ExpenseShareRow
from group_ledger.db.session import session_scope
from group_ledger.services.errors import ShareSumMismatch
from group_ledger.services.ledger import Ledger
from group_ledger.services.settlement import settle_ledger
from group_ledger.services.storage import delete_ledger, list_ledgers, load_ledger, save_ledger


async def test_save_and_load_round_trip(ledger, session):
    ledger.add_participant("Dave O'Neil")
    ledger.add_equal_split_expense("Alice", "100", ["Alice", "Bob", "Carol"])
    ledger.add_exact_split_expense("Dave O'Neil", "12.5", {"Bob": "2.5", "Dave O'Neil": "10"})

    await save_ledger(session, name="trip", ledger=ledger)
    await session.commit()

    loaded = await load_ledger(session, name="trip")

    assert loaded is not None
    assert loaded.participants == ("Alice", "Bob", "Carol", "Dave O'Neil")
    assert [r.payer for r in loaded.records] == ["Alice", "Dave O'Neil"]
    assert loaded.records[0].shares == {
        "Alice": Decimal("33.34"),
        "Bob": Decimal("33.33"),
        "Carol": Decimal("33.33"),
    }
    assert loaded.compute_net_balances() == ledger.compute_net_balances()
    assert settle_ledger(loaded) == settle_ledger(ledger)


async def test_load_missing_ledger(session):
    assert await load_ledger(session, name="nope") is None


async def test_save_replaces_previous_contents(ledger, session):
    ledger.add_equal_split_expense("Alice", 30, ["Alice", "Bob", "Carol"])
    await save_ledger(session, name="flat", ledger=ledger)
    await session.commit()

    other = Ledger()
    other.add_participant("Zed")
    await save_ledger(session, name="flat", ledger=other)
    await session.commit()

    loaded = await load_ledger(session, name="flat")
    assert loaded.participants == ("Zed",)
    assert loaded.records == ()
    assert await list_ledgers(session) == ["flat"]


async def test_empty_ledger_round_trip(session):
    await save_ledger(session, name="empty", ledger=Ledger())
    await session.commit()

    loaded = await load_ledger(session, name="empty")
    assert loaded.participants == ()
    assert loaded.compute_net_balances() == {}


async def test_list_and_delete(ledger, session):
    await save_ledger(session, name="b", ledger=ledger)
    await save_ledger(session, name="a", ledger=Ledger())
    await session.commit()

    assert await list_ledgers(session) == ["a", "b"]
    assert await delete_ledger(session, name="b") is True
    assert await delete_ledger(session, name="b") is False
    await session.commit()

    assert await list_ledgers(session) == ["a"]
    assert await load_ledger(session, name="b") is None


async def test_tampered_rows_are_rejected(ledger, sessionmaker):
    ledger.add_exact_split_expense("Alice", 20, {"Bob": 20})
    async with session_scope(sessionmaker) as s:
        await save_ledger(s, name="x", ledger=ledger)

    async with session_scope(sessionmaker) as s:
        await s.execute(update(ExpenseShareRow).values(share=Decimal(5)))

    async with sessionmaker() as s:
        with pytest.raises(ShareSumMismatch):
            await load_ledger(s, name="x")


async def test_session_scope_commits(ledger, sessionmaker):
    async with session_scope(sessionmaker) as s:
        await save_ledger(s, name="scoped", ledger=ledger)

    async with sessionmaker() as s:
        loaded = await load_ledger(s, name="scoped")
    assert loaded is not None
    assert loaded.participants == ledger.participants


async def test_session_scope_rolls_back_on_error(ledger, sessionmaker):
    with pytest.raises(RuntimeError):
        async with session_scope(sessionmaker) as s:
            await save_ledger(s, name="doomed", ledger=ledger)
            raise RuntimeError("boom")

    async with sessionmaker() as s:
        assert await list_ledgers(s) == []


async def test_round_trip_at_money_limits(sessionmaker):
    book = Ledger()
    for name in ("Alice", "Bob", "Carol"):
        book.add_participant(name)
    third = "333333333333333.333333333"
    book.add_exact_split_expense("Alice", "999999999999999.999999999", {"Alice": third, "Bob": third, "Carol": third})
    book.add_equal_split_expense("Bob", "100000000000000.000000001", ["Alice", "Bob", "Carol"])
    book.add_exact_split_expense("Carol", "1.000000004", {"Alice": "1.000000004"})

    async with session_scope(sessionmaker) as s:
        await save_ledger(s, name="limits", ledger=book)

    async with sessionmaker() as s:
        loaded = await load_ledger(s, name="limits")

    assert loaded.records == book.records
    assert loaded.records[2].amount == Decimal("1.000000004")
    assert loaded.compute_net_balances() == book.compute_net_balances()
