from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from group_ledger.db.models import Base
from group_ledger.db.session import create_engine, create_sessionmaker
from group_ledger.services.ledger import Ledger


@pytest.fixture
def ledger() -> Ledger:
    book = Ledger()
    for name in ("Alice", "Bob", "Carol"):
        book.add_participant(name)
    return book


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}"


@pytest.fixture
async def sessionmaker(database_url):
    engine = create_engine(database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield create_sessionmaker(engine)
    finally:
        await engine.dispose()


@pytest.fixture
async def session(sessionmaker) -> AsyncIterator[AsyncSession]:
    async with sessionmaker() as s:
        yield s
