from __future__ import annotations

import logging
from decimal import Decimal

import pytest

from group_ledger.config import Settings, settings
from group_ledger.logging import configure_logging
from group_ledger.services import examples
from group_ledger.services.errors import ShareSumMismatch, UnknownParticipant
from group_ledger.services.ledger import Ledger


def test_defaults(monkeypatch):
    for var in ("DATABASE_URL", "SHARE_TOLERANCE", "SETTLE_EPSILON", "BALANCE_NOISE", "MONEY_QUANTUM"):
        monkeypatch.delenv(var, raising=False)

    s = Settings()

    assert s.share_tolerance == Decimal("0.01")
    assert s.settle_epsilon == Decimal("0.000001")
    assert s.balance_noise == Decimal("0.000000001")
    assert s.money_quantum == Decimal("0.01")
    assert s.database_url.startswith("sqlite+aiosqlite://")


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("SHARE_TOLERANCE", "0.5")
    monkeypatch.setenv("log_level", "debug")
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://u:p@db/ledger")

    s = Settings()

    assert s.share_tolerance == Decimal("0.5")
    assert s.log_level == "debug"
    assert s.database_url == "postgresql+asyncpg://u:p@db/ledger"


def test_share_tolerance_is_read_at_call_time(monkeypatch):
    book = Ledger()
    book.add_participant("A")

    with pytest.raises(ShareSumMismatch):
        book.add_exact_split_expense("A", 10, {"A": "9.9"})

    monkeypatch.setattr(settings, "share_tolerance", Decimal("0.2"))
    book.add_exact_split_expense("A", 10, {"A": "9.9"})
    assert len(book) == 1


def test_configure_logging_sets_levels():
    root = logging.getLogger()
    saved = root.handlers[:], root.level
    try:
        configure_logging("debug")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

        configure_logging(logging.INFO, sql_echo=True)
        assert logging.getLogger("sqlalchemy.engine").level == logging.INFO
    finally:
        root.handlers[:] = saved[0]
        root.setLevel(saved[1])


def test_rejections_are_logged(caplog):
    book = Ledger()
    with caplog.at_level(logging.INFO, logger="group_ledger.services.ledger"):
        with pytest.raises(UnknownParticipant):
            book.add_equal_split_expense("Ghost", 1, ["Ghost"])

    assert "Unknown participant: Ghost" in caplog.text


@pytest.mark.parametrize(
    "example",
    [examples.example_equal_split_remainder, examples.example_settlement, examples.example_trip],
)
def test_examples(example):
    example()
