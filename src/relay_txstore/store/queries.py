"""Closed set of store queries and their SQL predicates.

Callers describe *what* to match; only :func:`where_clauses` knows how that
maps onto the ``transactions`` table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from relay_txstore.store.models import StoredTransaction

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement


@dataclass(frozen=True)
class ByTxId:
    tx_id: str


@dataclass(frozen=True)
class BySlot:
    signer: str
    nonce: int


@dataclass(frozen=True)
class BySigner:
    signer: str


@dataclass(frozen=True)
class BySignerNonceRange:
    """Every record of ``signer`` with ``nonce <= max_nonce``."""

    signer: str
    max_nonce: int


@dataclass(frozen=True)
class AllRecords:
    pass


Query = ByTxId | BySlot | BySigner | BySignerNonceRange | AllRecords


def where_clauses(query: Query) -> list[ColumnElement[bool]]:
    """Translate ``query`` into SQLAlchemy predicates on :class:`StoredTransaction`.

    Hex keys are lowercased here so no caller can miss a match on case.
    """
    match query:
        case ByTxId(tx_id=tx_id):
            return [StoredTransaction.tx_id == tx_id.lower()]
        case BySlot(signer=signer, nonce=nonce):
            return [
                StoredTransaction.signer == signer.lower(),
                StoredTransaction.nonce == nonce,
            ]
        case BySigner(signer=signer):
            return [StoredTransaction.signer == signer.lower()]
        case BySignerNonceRange(signer=signer, max_nonce=max_nonce):
            return [
                StoredTransaction.signer == signer.lower(),
                StoredTransaction.nonce <= max_nonce,
            ]
        case AllRecords():
            return []
    msg = f"Unsupported query {query!r}"
    raise TypeError(msg)
