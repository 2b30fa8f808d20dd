"""Durable bookkeeping of in-flight relay transactions."""

from relay_txstore.chain.transaction import ChainTransaction
from relay_txstore.config.settings import TXSTORE_FILENAME, StoreConfig
from relay_txstore.errors.relay_errors import RelayError
from relay_txstore.errors.store_errors import DuplicateKey, StorageIOError, ValidationError
from relay_txstore.store.manager import TransactionStore
from relay_txstore.store.record import (
    TransactionRecord,
    from_chain_transaction,
    to_chain_transaction,
)

__all__ = [
    "TXSTORE_FILENAME",
    "ChainTransaction",
    "DuplicateKey",
    "RelayError",
    "StorageIOError",
    "StoreConfig",
    "TransactionRecord",
    "TransactionStore",
    "ValidationError",
    "from_chain_transaction",
    "to_chain_transaction",
]
