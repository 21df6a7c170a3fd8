from __future__ import annotations

from decimal import Decimal

from group_ledger.services.ledger import Ledger
from group_ledger.services.settlement import Transfer, settle, settle_ledger


def example_equal_split_remainder() -> None:
    """
    Equal split in cents:
      share = amount / n rounded down to 0.01
      leftover cents go +0.01 to the first participants in list order.
    """

    ledger = Ledger()
    for name in ("Alice", "Bob", "Carol", "Dave"):
        ledger.add_participant(name)

    record = ledger.add_equal_split_expense("Alice", Decimal("100.03"), ["Alice", "Bob", "Carol", "Dave"])
    assert dict(record.shares) == {
        "Alice": Decimal("25.01"),
        "Bob": Decimal("25.01"),
        "Carol": Decimal("25.01"),
        "Dave": Decimal("25.00"),
    }
    assert sum(record.shares.values()) == record.amount


def example_settlement() -> None:
    """
    Balance sign:
      positive -> is owed
      negative -> owes
    """

    balances = {
        "Alice": Decimal("100"),
        "Bob": Decimal("-70"),
        "Carol": Decimal("-30"),
    }
    transfers = settle(balances)
    assert transfers == [
        Transfer(debtor="Bob", creditor="Alice", amount=Decimal("70")),
        Transfer(debtor="Carol", creditor="Alice", amount=Decimal("30")),
    ]


def example_trip() -> None:
    ledger = Ledger()
    for name in ("Alice", "Bob", "Carol"):
        ledger.add_participant(name)

    ledger.add_equal_split_expense("Alice", 300, ["Alice", "Bob", "Carol"])
    ledger.add_exact_split_expense("Bob", 150, {"Alice": 50, "Bob": 50, "Carol": 50})

    # Alice: +300 - 100 - 50; Bob: +150 - 100 - 50; Carol: -100 - 50
    assert ledger.compute_net_balances() == {
        "Alice": Decimal("150"),
        "Bob": Decimal("0"),
        "Carol": Decimal("-150"),
    }
    assert settle_ledger(ledger) == [
        Transfer(debtor="Carol", creditor="Alice", amount=Decimal("150")),
    ]
