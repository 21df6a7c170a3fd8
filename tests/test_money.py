from __future__ import annotations

from decimal import Decimal, localcontext

import pytest

from group_ledger.services.errors import InvalidAmount
from group_ledger.services.money import MAX_SCALE, MONEY_LIMIT, split_evenly, to_decimal


def test_split_evenly_hands_out_leftover_cents():
    assert split_evenly(Decimal("10"), 3, Decimal("0.01")) == [
        Decimal("3.34"),
        Decimal("3.33"),
        Decimal("3.33"),
    ]


def test_split_evenly_keeps_full_precision_for_huge_amounts():
    amount = Decimal("1E+27")

    parts = split_evenly(amount, 3, Decimal("0.01"))

    with localcontext() as ctx:
        ctx.prec = 40
        assert sum(parts) == amount
    assert parts[1] == Decimal("333333333333333333333333333.33")
    assert parts[0] == Decimal("333333333333333333333333333.34")


def test_split_evenly_needs_a_slot():
    with pytest.raises(ValueError):
        split_evenly(Decimal(1), 0, Decimal("0.01"))


def test_to_decimal_limits():
    assert to_decimal(MONEY_LIMIT - Decimal(1).scaleb(-MAX_SCALE)) == Decimal("999999999999999.999999999")
    with pytest.raises(InvalidAmount):
        to_decimal(MONEY_LIMIT)
    with pytest.raises(InvalidAmount):
        to_decimal("0.0000000001")


def test_unbounded_conversion_for_balances():
    assert to_decimal("-1E+20", allow_negative=True, bounded=False) == Decimal("-1E+20")
