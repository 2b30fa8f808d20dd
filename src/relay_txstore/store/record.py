"""TransactionRecord — canonical stored form of one submitted transaction.

Every hex field is lowercase and ``0x``-prefixed; ``gas``, ``gas_price`` and
``nonce`` are plain integers. Conversion helpers map to and from
:class:`~relay_txstore.chain.transaction.ChainTransaction`.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

from eth_utils import encode_hex

from relay_txstore.chain.transaction import ChainTransaction, int_to_hex

ZERO_VALUE = "0x"


def _lower(value: str | None) -> str | None:
    return value.lower() if value is not None else None


@dataclass(frozen=True)
class TransactionRecord:
    """One transaction attempt occupying a ``(signer, nonce)`` slot.

    Attributes:
        from_address: Signer address.
        to: Recipient address ("0x" for contract creation).
        gas: Gas limit.
        gas_price: Gas price in wei.
        data: Call data.
        nonce: Position in the signer's transaction sequence.
        value: Amount in wei as minimal big-endian hex.
        tx_id: keccak hash of the signed transaction.
        attempts: How many times this slot has been submitted.
        v: Signature recovery id, once signed.
        r: Signature ``r``, once signed.
        s: Signature ``s``, once signed.
    """

    from_address: str
    to: str
    gas: int
    gas_price: int
    data: str
    nonce: int
    tx_id: str
    attempts: int
    value: str = ZERO_VALUE
    v: str | None = None
    r: str | None = None
    s: str | None = None

    @property
    def signer(self) -> str:
        """Lowercase signer address, half of the slot key."""
        return self.from_address.lower()

    @property
    def slot(self) -> tuple[str, int]:
        return self.signer, self.nonce

    def canonical(self) -> TransactionRecord:
        """Return a copy with every hex field lowercased."""
        return dataclasses.replace(
            self,
            from_address=self.from_address.lower(),
            to=self.to.lower(),
            data=self.data.lower(),
            value=(self.value or ZERO_VALUE).lower(),
            tx_id=self.tx_id.lower(),
            v=_lower(self.v),
            r=_lower(self.r),
            s=_lower(self.s),
        )

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)


def from_chain_transaction(
    tx: ChainTransaction, from_address: str, attempts: int
) -> TransactionRecord:
    """Build the stored record for a chain transaction sent by ``from_address``."""
    signed = tx.is_signed
    return TransactionRecord(
        from_address=from_address.lower(),
        to=encode_hex(tx.to),
        gas=tx.gas_limit,
        gas_price=tx.gas_price,
        data=encode_hex(tx.data),
        nonce=tx.nonce,
        tx_id=tx.txid(),
        attempts=attempts,
        value=int_to_hex(tx.value),
        v=int_to_hex(tx.v) if signed else None,
        r=int_to_hex(tx.r) if signed else None,
        s=int_to_hex(tx.s) if signed else None,
    )


def to_chain_transaction(record: TransactionRecord) -> ChainTransaction:
    """Rebuild a chain transaction from a stored record.

    The hash is recomputed from the content; ``record.tx_id`` is not consulted.
    """
    return ChainTransaction.from_fields(
        nonce=record.nonce,
        gas_price=record.gas_price,
        gas_limit=record.gas,
        to=record.to,
        value=record.value,
        data=record.data,
        v=record.v,
        r=record.r,
        s=record.s,
    )
