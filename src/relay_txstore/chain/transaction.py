"""Legacy Ethereum transaction — RLP serialisation and content hash.

Provides the chain-side representation the relay signs and broadcasts:
- ``ChainTransaction`` RLP sedes (nonce, gas price, gas limit, to, value,
  data, v, r, s)
- keccak256 transaction hash
- Raw hex encoding / decoding
- Construction from the hex-or-int field shapes used by stored records
"""

from __future__ import annotations

from typing import Any

import rlp
from eth_utils import big_endian_to_int, decode_hex, encode_hex, keccak
from rlp.sedes import Binary, big_endian_int, binary

ADDRESS_LEN = 20


def int_to_hex(value: int) -> str:
    """Encode a non-negative integer as minimal big-endian hex ("0x" for zero)."""
    if value < 0:
        msg = f"Cannot hex-encode negative integer {value}"
        raise ValueError(msg)
    return encode_hex(value.to_bytes((value.bit_length() + 7) // 8, "big"))


def to_int(value: int | str | bytes | None) -> int:
    """Decode an int, ``0x`` hex string, decimal string or big-endian bytes."""
    if value is None:
        return 0
    if isinstance(value, bool):
        msg = "Boolean is not a valid integer field"
        raise TypeError(msg)
    if isinstance(value, int):
        return value
    if isinstance(value, bytes):
        return big_endian_to_int(value)
    if value.lower().startswith("0x"):
        return int(value, 16) if len(value) > 2 else 0
    return int(value)


def to_binary(value: str | bytes | None) -> bytes:
    """Decode a ``0x`` hex string or pass raw bytes through."""
    if value is None:
        return b""
    if isinstance(value, bytes):
        return value
    return decode_hex(value)


class ChainTransaction(rlp.Serializable):
    """A legacy (pre-typed-envelope) Ethereum transaction.

    An unsigned transaction carries ``v == r == s == 0``.
    """

    fields = [
        ("nonce", big_endian_int),
        ("gas_price", big_endian_int),
        ("gas_limit", big_endian_int),
        ("to", Binary.fixed_length(ADDRESS_LEN, allow_empty=True)),
        ("value", big_endian_int),
        ("data", binary),
        ("v", big_endian_int),
        ("r", big_endian_int),
        ("s", big_endian_int),
    ]

    nonce: int
    gas_price: int
    gas_limit: int
    to: bytes
    value: int
    data: bytes
    v: int
    r: int
    s: int

    @classmethod
    def from_fields(
        cls,
        *,
        nonce: int | str,
        gas_price: int | str,
        gas_limit: int | str,
        to: str | bytes | None = None,
        value: int | str | None = None,
        data: str | bytes | None = None,
        v: int | str | None = None,
        r: int | str | None = None,
        s: int | str | None = None,
    ) -> ChainTransaction:
        """Build a transaction from ints, hex strings or bytes.

        Missing ``to`` means contract creation; missing ``value``, ``data``
        and signature components default to zero / empty.
        """
        return cls(
            nonce=to_int(nonce),
            gas_price=to_int(gas_price),
            gas_limit=to_int(gas_limit),
            to=to_binary(to),
            value=to_int(value),
            data=to_binary(data),
            v=to_int(v),
            r=to_int(r),
            s=to_int(s),
        )

    @classmethod
    def from_bytes(cls, raw: bytes) -> ChainTransaction:
        """Decode an RLP-encoded transaction."""
        return rlp.decode(raw, cls)

    @classmethod
    def from_hex(cls, hex_str: str) -> ChainTransaction:
        """Decode a ``0x``-prefixed raw transaction hex string."""
        return cls.from_bytes(decode_hex(hex_str))

    def encode(self) -> bytes:
        """RLP-encode the transaction."""
        return rlp.encode(self)

    def to_hex(self) -> str:
        """Raw transaction as a ``0x``-prefixed hex string."""
        return encode_hex(self.encode())

    def hash(self) -> bytes:
        """keccak256 of the RLP encoding."""
        return keccak(self.encode())

    def txid(self) -> str:
        """Transaction hash as lowercase ``0x`` hex."""
        return encode_hex(self.hash())

    @property
    def is_signed(self) -> bool:
        """True once any signature component is set."""
        return bool(self.v or self.r or self.s)

    @property
    def is_contract_creation(self) -> bool:
        return self.to == b""

    def to_dict(self) -> dict[str, Any]:
        """Field mapping with hex-encoded byte fields, handy for logging."""
        return {
            "nonce": self.nonce,
            "gas_price": self.gas_price,
            "gas_limit": self.gas_limit,
            "to": encode_hex(self.to),
            "value": self.value,
            "data": encode_hex(self.data),
            "v": self.v,
            "r": self.r,
            "s": self.s,
        }
