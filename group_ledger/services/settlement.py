from __future__ import annotations

import heapq
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from group_ledger.config import settings
from group_ledger.services.ledger import Ledger
from group_ledger.services.money import ZERO, Number, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transfer:
    debtor: str  # pays
    creditor: str  # receives
    amount: Decimal


def settle(net_balances: Mapping[str, Number], *, epsilon: Optional[Number] = None) -> list[Transfer]:
    """
    Greedy min-cash-flow settlement.

    net > eps is a creditor, net < -eps a debtor. The largest remaining creditor is
    repeatedly matched with the largest remaining debtor. Not guaranteed to find the
    fewest transfers, but never emits more than (participants - 1).
    Input is expected to sum to zero; otherwise leftovers are dropped.
    """
    eps = settings.settle_epsilon if epsilon is None else to_decimal(epsilon, bounded=False)

    # heapq is a min-heap, so amounts are negated; ties fall back to the id.
    creditors: list[tuple[Decimal, str]] = []
    debtors: list[tuple[Decimal, str]] = []
    for pid, raw in net_balances.items():
        amt = to_decimal(raw, allow_negative=True, bounded=False)
        if amt > eps:
            creditors.append((-amt, pid))
        elif amt < -eps:
            debtors.append((amt, pid))
    heapq.heapify(creditors)
    heapq.heapify(debtors)

    out: list[Transfer] = []
    while creditors and debtors:
        neg_credit, c_id = heapq.heappop(creditors)
        neg_debt, d_id = heapq.heappop(debtors)
        credit = -neg_credit
        debt = -neg_debt

        pay = min(credit, debt)
        if pay > eps:
            out.append(Transfer(debtor=d_id, creditor=c_id, amount=pay))
        credit -= pay
        debt -= pay

        if credit > eps:
            heapq.heappush(creditors, (-credit, c_id))
        if debt > eps:
            heapq.heappush(debtors, (-debt, d_id))

    if creditors or debtors:
        logger.warning(
            "Balances did not net to zero; %d creditor(s) and %d debtor(s) left unsettled",
            len(creditors),
            len(debtors),
        )
    return out


def settle_ledger(ledger: Ledger) -> list[Transfer]:
    transfers = settle(ledger.compute_net_balances())
    logger.debug("Settled %r with %d transfer(s)", ledger, len(transfers))
    return transfers


def apply_transfers(net_balances: Mapping[str, Number], transfers: Iterable[Transfer]) -> dict[str, Decimal]:
    """Balances after every transfer is paid: the debtor moves up, the creditor down."""
    after = {pid: to_decimal(v, allow_negative=True, bounded=False) for pid, v in net_balances.items()}
    for t in transfers:
        after[t.debtor] = after.get(t.debtor, ZERO) + t.amount
        after[t.creditor] = after.get(t.creditor, ZERO) - t.amount
    return after
