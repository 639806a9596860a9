"""Async SQLAlchemy engine and scoped session management."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from authsvc.db.base import Base

logger = structlog.get_logger()


class Database:
    """Owns the engine and session factory for one application instance."""

    def __init__(self, url: str, *, schema: str | None = None, echo: bool = False) -> None:
        engine_kwargs: dict[str, Any] = {"pool_pre_ping": True, "echo": echo}
        if url.startswith("postgresql+asyncpg"):
            engine_kwargs.update(
                pool_size=20,
                max_overflow=10,
                connect_args={"statement_cache_size": 0},
            )
        if schema:
            engine_kwargs["execution_options"] = {"schema_translate_map": {None: schema}}

        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_all(self) -> None:
        """Create all tables from ORM metadata (tests and local development)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        await self.engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session that is always closed on exit."""
        async with self._session_factory() as session:
            yield session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """
        Yield a session wrapped in a single transaction.

        Commits when the block exits normally. On any exception the transaction
        is rolled back and the original exception re-raised; a failing rollback
        is logged and never replaces it.
        """
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except BaseException:
                await _safe_rollback(session)
                raise


async def _safe_rollback(session: AsyncSession) -> None:
    try:
        await session.rollback()
    except Exception:
        logger.error("rollback_failed", exc_info=True)
