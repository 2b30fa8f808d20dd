"""Database engine factory — SQLite via aiosqlite.

Provides async SQLAlchemy engine creation for the txstore database:
- File-backed SQLite inside the configured working directory
- Shared in-memory SQLite for ephemeral use
- Configurable echo/debug settings
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool

if TYPE_CHECKING:
    from relay_txstore.config.settings import StoreConfig

# Seconds SQLite waits on a locked database before giving up
BUSY_TIMEOUT = 30


def create_engine(config: StoreConfig) -> AsyncEngine:
    """Create an async SQLAlchemy engine from store configuration.

    Args:
        config: Store configuration selecting file or memory mode.

    Returns:
        A configured ``AsyncEngine`` ready for use.
    """
    kwargs: dict[str, Any] = {
        "echo": config.debug_sql,
    }

    # A memory database lives inside one connection; sessions take turns on it
    if config.in_memory:
        kwargs["poolclass"] = AsyncAdaptedQueuePool
        kwargs["pool_size"] = 1
        kwargs["max_overflow"] = 0
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs["connect_args"] = {"timeout": BUSY_TIMEOUT}

    return create_async_engine(config.dsn, **kwargs)
