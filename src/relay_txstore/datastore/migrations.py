"""Schema helpers for the txstore database."""

from __future__ import annotations

from typing import TYPE_CHECKING

from relay_txstore.store.models import Base

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine


async def run_auto_migrate(engine: AsyncEngine) -> None:
    """Create the transactions table and its unique indexes if missing.

    Args:
        engine: The async SQLAlchemy engine to migrate.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_all_tables(engine: AsyncEngine) -> None:
    """Drop all tables (test/dev utility only).

    Args:
        engine: The async SQLAlchemy engine.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
