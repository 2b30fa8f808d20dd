"""Datastore client — owns the txstore engine and hands out sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from relay_txstore.datastore.engines import create_engine

if TYPE_CHECKING:
    from relay_txstore.config.settings import StoreConfig


class Datastore:
    """Engine and session factory for one txstore database.

    Schema creation is left to :mod:`relay_txstore.datastore.migrations`;
    this class only knows where the database lives and how to reach it.
    """

    def __init__(self, config: StoreConfig) -> None:
        self._config = config
        self._engine: AsyncEngine | None = None
        self._sessions: async_sessionmaker[AsyncSession] | None = None

    def _require_open(self) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
        if self._engine is None or self._sessions is None:
            msg = "Datastore is not open. Call open() first."
            raise RuntimeError(msg)
        return self._engine, self._sessions

    @property
    def engine(self) -> AsyncEngine:
        """The async engine; raises ``RuntimeError`` while closed."""
        return self._require_open()[0]

    async def open(self) -> None:
        """Create the working directory (file mode) and the engine.

        No connection is made here; the first statement opens the database.

        Raises:
            OSError: If the working directory cannot be created.
        """
        db_path = self._config.db_path
        if db_path is not None:
            db_path.parent.mkdir(parents=True, exist_ok=True)

        engine = create_engine(self._config)
        self._engine = engine
        self._sessions = async_sessionmaker(engine, expire_on_commit=False)

    async def close(self) -> None:
        """Dispose the engine; a memory database is discarded with it."""
        engine, self._engine, self._sessions = self._engine, None, None
        if engine is not None:
            await engine.dispose()

    def session(self) -> AsyncSession:
        """New ``AsyncSession``; use as an async context manager."""
        return self._require_open()[1]()

    @property
    def location(self) -> str:
        return self._config.location

    @property
    def is_open(self) -> bool:
        return self._engine is not None
