#!/usr/bin/env python3
"""Txstore Tool — inspect and prune the relay's pending transactions.

A standalone CLI utility operating on the store selected by the
``RELAY_TXSTORE_*`` environment variables:

    # List every pending transaction, or only those of one signer
    python -m relay_txstore.tools.txstore_tool list [signer]

    # Show a single transaction by hash
    python -m relay_txstore.tools.txstore_tool get <tx_id>

    # Drop every pending transaction of a signer up to a confirmed nonce
    python -m relay_txstore.tools.txstore_tool prune <signer> <nonce>

    # Wipe the store
    python -m relay_txstore.tools.txstore_tool clear
"""

from __future__ import annotations

import asyncio
import sys
from typing import TYPE_CHECKING

from relay_txstore.config.settings import StoreConfig
from relay_txstore.store.manager import TransactionStore

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from relay_txstore.store.record import TransactionRecord


def _format(record: TransactionRecord) -> str:
    return (
        f"  {record.signer}  nonce={record.nonce:<6} attempts={record.attempts:<3} "
        f"gas_price={record.gas_price:<14} {record.tx_id}"
    )


async def _cmd_list(store: TransactionStore, signer: str | None = None) -> None:
    """Print pending transactions ordered by nonce."""
    records = await store.list_by_signer(signer) if signer else await store.list_all()
    if not records:
        print("No pending transactions")
        return
    print(f"Pending transactions ({store.datastore.location}):")
    print("-" * 80)
    for record in records:
        print(_format(record))
    print("-" * 80)
    print(f"  Total: {len(records)}")


async def _cmd_get(store: TransactionStore, tx_id: str) -> None:
    record = await store.get_by_id(tx_id)
    if record is None:
        print(f"Transaction {tx_id} not found")
        return
    for key, value in record.to_dict().items():
        print(f"{key + ':':<14} {value}")


async def _cmd_prune(store: TransactionStore, signer: str, nonce: str) -> None:
    removed = await store.remove_up_to(signer, nonce)
    print(f"Removed {removed} transaction(s) of {signer.lower()} up to nonce {nonce}")


async def _cmd_clear(store: TransactionStore) -> None:
    removed = await store.clear()
    print(f"Removed {removed} transaction(s)")


def _run(command: Callable[..., Awaitable[None]], *args: str) -> None:
    async def _go() -> None:
        async with TransactionStore(StoreConfig()) as store:
            await command(store, *args)

    asyncio.run(_go())


def main() -> None:
    """CLI entry point."""
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    cmd = sys.argv[1].lower()

    if cmd == "list":
        _run(_cmd_list, *sys.argv[2:3])
    elif cmd == "get":
        if len(sys.argv) < 3:
            print("Usage: txstore_tool get <tx_id>")
            sys.exit(1)
        _run(_cmd_get, sys.argv[2])
    elif cmd == "prune":
        if len(sys.argv) < 4:
            print("Usage: txstore_tool prune <signer> <nonce>")
            sys.exit(1)
        _run(_cmd_prune, sys.argv[2], sys.argv[3])
    elif cmd == "clear":
        _run(_cmd_clear)
    else:
        print(f"Unknown command: {cmd}")
        print(__doc__)
        sys.exit(1)


if __name__ == "__main__":
    main()
