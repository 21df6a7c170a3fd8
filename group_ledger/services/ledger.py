from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Union

from group_ledger.config import settings
from group_ledger.services.errors import (
    EmptyParticipantSet,
    EmptyShareSet,
    InvalidParticipant,
    LedgerError,
    ShareSumMismatch,
    UnknownParticipant,
)
from group_ledger.services.money import ZERO, Number, is_negligible, split_evenly, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EqualSplit:
    participants: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "participants", tuple(self.participants))


@dataclass(frozen=True)
class ExactSplit:
    # (participant, share) pairs; a mapping is flattened into pairs
    shares: tuple[tuple[str, Number], ...]

    def __post_init__(self) -> None:
        pairs = self.shares.items() if isinstance(self.shares, Mapping) else self.shares
        object.__setattr__(self, "shares", tuple((p, s) for p, s in pairs))


Split = Union[EqualSplit, ExactSplit]


@dataclass(frozen=True)
class ExpenseRecord:
    payer: str
    amount: Decimal
    # participant -> absolute share of amount
    shares: Mapping[str, Decimal] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "shares", MappingProxyType(dict(self.shares)))


class Ledger:
    """
    Participants plus an append-only list of expense records.

    Net balance sign: positive -> the group owes this participant,
    negative -> this participant owes the group.
    """

    def __init__(self) -> None:
        # dict keeps registration order; values unused
        self._participants: dict[str, None] = {}
        self._records: list[ExpenseRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"<Ledger participants={len(self._participants)} records={len(self._records)}>"

    @property
    def participants(self) -> tuple[str, ...]:
        return tuple(self._participants)

    @property
    def records(self) -> tuple[ExpenseRecord, ...]:
        return tuple(self._records)

    def has_participant(self, participant_id: str) -> bool:
        return participant_id in self._participants

    def add_participant(self, participant_id: str) -> None:
        if not isinstance(participant_id, str) or not participant_id.strip():
            raise InvalidParticipant(participant_id)
        if participant_id in self._participants:
            return
        self._participants[participant_id] = None
        logger.debug("Added participant %s", participant_id)

    def add_equal_split_expense(self, payer: str, amount: Number, participants: Iterable[str]) -> ExpenseRecord:
        return self.add_expense(payer, amount, EqualSplit(participants))

    def add_exact_split_expense(
        self,
        payer: str,
        amount: Number,
        shares: Union[Mapping[str, Number], Iterable[tuple[str, Number]]],
    ) -> ExpenseRecord:
        return self.add_expense(payer, amount, ExactSplit(shares))

    def add_expense(self, payer: str, amount: Number, split: Split) -> ExpenseRecord:
        try:
            record = self._build_record(payer, amount, split)
        except LedgerError as e:
            logger.info("Rejected expense paid by %r: %s", payer, e)
            raise
        self._records.append(record)
        logger.debug("Added expense %s paid by %s split %d ways", record.amount, payer, len(record.shares))
        return record

    def _require_known(self, participant_id: str) -> None:
        if participant_id not in self._participants:
            raise UnknownParticipant(participant_id)

    def _build_record(self, payer: str, amount: Number, split: Split) -> ExpenseRecord:
        self._require_known(payer)
        amt = to_decimal(amount)

        shares: dict[str, Decimal] = {}
        if isinstance(split, EqualSplit):
            if not split.participants:
                raise EmptyParticipantSet()
            for p in split.participants:
                self._require_known(p)
            parts = split_evenly(amt, len(split.participants), settings.money_quantum)
            for p, part in zip(split.participants, parts):
                shares[p] = shares.get(p, ZERO) + part
        elif isinstance(split, ExactSplit):
            if not split.shares:
                raise EmptyShareSet()
            total = ZERO
            for p, raw in split.shares:
                s = to_decimal(raw)
                self._require_known(p)
                shares[p] = shares.get(p, ZERO) + s
                total += s
            if abs(total - amt) > settings.share_tolerance:
                raise ShareSumMismatch(expected=amt, actual=total)
        else:
            raise TypeError(f"Unsupported split: {split!r}")

        return ExpenseRecord(payer=payer, amount=amt, shares=shares)

    def compute_net_balances(self) -> dict[str, Decimal]:
        net: dict[str, Decimal] = {p: ZERO for p in self._participants}
        for r in self._records:
            # payer fronted the whole amount
            net[r.payer] += r.amount
            for p, share in r.shares.items():
                net[p] -= share

        noise = settings.balance_noise
        for p, v in net.items():
            if is_negligible(v, noise):
                net[p] = ZERO
        return net

    @classmethod
    def from_snapshot(cls, participants: Iterable[str], records: Iterable[Any]) -> Ledger:
        """
        Rebuild a ledger from its bulk views.

        records: ExpenseRecord-like objects exposing payer, amount and shares.
        Every record goes through the same validation as add_expense.
        """
        ledger = cls()
        for p in participants:
            ledger.add_participant(p)
        for r in records:
            ledger.add_expense(r.payer, r.amount, ExactSplit(r.shares))
        return ledger
