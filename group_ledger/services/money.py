from __future__ import annotations

from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext
from typing import Union

from group_ledger.services.errors import InvalidAmount

Number = Union[Decimal, int, float, str]

ZERO = Decimal(0)

# Money domain, shared with the storage columns (group_ledger.db.models.MONEY).
MAX_SCALE = 9
MAX_INTEGER_DIGITS = 15
MONEY_STEP = Decimal(1).scaleb(-MAX_SCALE)
MONEY_LIMIT = Decimal(10) ** MAX_INTEGER_DIGITS


def to_decimal(value: Number, *, allow_negative: bool = False, bounded: bool = True) -> Decimal:
    """
    Convert a user supplied amount to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1"), not its binary expansion.
    Raises InvalidAmount for non-numeric, non-finite and (unless allowed) negative values.
    When bounded, the value must also fit the money domain: at most MAX_INTEGER_DIGITS
    integer digits and MAX_SCALE decimal places. Derived balances pass bounded=False.
    """
    if isinstance(value, bool):
        raise InvalidAmount(value, "not a number")
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, (int, float)):
        d = Decimal(str(value))
    elif isinstance(value, str):
        try:
            d = Decimal(value.strip())
        except InvalidOperation:
            raise InvalidAmount(value, "not a number") from None
    else:
        raise InvalidAmount(value, "not a number")

    if not d.is_finite():
        raise InvalidAmount(value, "must be finite")
    if d < 0 and not allow_negative:
        raise InvalidAmount(value, "must not be negative")
    if bounded:
        if abs(d) >= MONEY_LIMIT:
            raise InvalidAmount(value, f"must have at most {MAX_INTEGER_DIGITS} integer digits")
        if d.quantize(MONEY_STEP) != d:
            raise InvalidAmount(value, f"must have at most {MAX_SCALE} decimal places")
    return d


def split_evenly(amount: Decimal, n: int, quantum: Decimal) -> list[Decimal]:
    """
    Split amount into n parts that add up to exactly amount.

    base = amount / n rounded down to quantum;
    leftover quanta go +1 quantum to the first slots in order;
    any sub-quantum residue goes to slot 0.
    """
    if n <= 0:
        raise ValueError("n must be positive")
    # Room for every digit of amount plus the quantum's places, whatever the amount's size.
    scale = max(-amount.as_tuple().exponent, -quantum.as_tuple().exponent, 0)
    digits = max(amount.adjusted(), 0) + scale + 2
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, digits + len(str(n)) + 2)
        base = (amount / n).quantize(quantum, rounding=ROUND_DOWN)
        parts = [base] * n
        rest = amount - base * n
        i = 0
        while rest >= quantum and i < n:
            parts[i] += quantum
            rest -= quantum
            i += 1
        if rest:
            parts[0] += rest
    return parts


def is_negligible(value: Decimal, epsilon: Decimal) -> bool:
    return abs(value) < epsilon
