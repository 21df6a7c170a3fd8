from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from group_ledger.config import settings


def create_engine(url: Optional[str] = None) -> AsyncEngine:
    return create_async_engine(
        url or settings.database_url,
        echo=settings.sql_echo,
        pool_pre_ping=True,
    )


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


engine = create_engine()
SessionMaker = create_sessionmaker(engine)


@asynccontextmanager
async def session_scope(
    sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None,
) -> AsyncIterator[AsyncSession]:
    async with (sessionmaker or SessionMaker)() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
