"""Shared test fixtures for the relay txstore test suite."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from relay_txstore.config.settings import StoreConfig
from relay_txstore.store.manager import TransactionStore
from relay_txstore.store.record import TransactionRecord

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

SIGNER = "0x" + "aa" * 20
OTHER_SIGNER = "0x" + "bb" * 20
RECIPIENT = "0x" + "cc" * 20


@pytest.fixture
def store_config() -> StoreConfig:
    """Provide an in-memory StoreConfig."""
    return StoreConfig(in_memory=True)


@pytest.fixture
async def store(store_config) -> AsyncIterator[TransactionStore]:
    """Provide an opened in-memory TransactionStore."""
    txstore = TransactionStore(store_config)
    await txstore.open()
    yield txstore
    await txstore.close()


@pytest.fixture
def make_record() -> Callable[..., TransactionRecord]:
    """Factory building a valid record; keyword arguments override fields."""

    def _make(**overrides: Any) -> TransactionRecord:
        nonce = overrides.get("nonce", 0)
        fields: dict[str, Any] = {
            "from_address": SIGNER,
            "to": RECIPIENT,
            "gas": 21000,
            "gas_price": 1_000_000_000,
            "data": "0x",
            "nonce": nonce,
            "tx_id": "0x" + f"{nonce:064x}",
            "attempts": 1,
            "value": "0x0de0b6b3a7640000",
        }
        fields.update(overrides)
        return TransactionRecord(**fields)

    return _make
