from __future__ import annotations

from decimal import Decimal
from typing import Any


class LedgerError(ValueError):
    """Base class for rejected ledger input. Nothing is stored when one is raised."""


class InvalidParticipant(LedgerError):
    def __init__(self, value: Any) -> None:
        super().__init__(f"Invalid participant id: {value!r}")
        self.value = value


class UnknownParticipant(LedgerError):
    def __init__(self, participant_id: str) -> None:
        super().__init__(f"Unknown participant: {participant_id}")
        self.participant_id = participant_id


class EmptyParticipantSet(LedgerError):
    def __init__(self) -> None:
        super().__init__("No participants.")


class EmptyShareSet(LedgerError):
    def __init__(self) -> None:
        super().__init__("No shares provided.")


class ShareSumMismatch(LedgerError):
    def __init__(self, expected: Decimal, actual: Decimal) -> None:
        super().__init__(f"Share sum ({actual}) != amount ({expected})")
        self.expected = expected
        self.actual = actual


class InvalidAmount(LedgerError):
    def __init__(self, value: Any, reason: str = "must be a finite, non-negative number") -> None:
        super().__init__(f"Invalid amount {value!r}: {reason}")
        self.value = value
