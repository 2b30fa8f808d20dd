"""SQLAlchemy ORM model for stored relay transactions."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - SQLAlchemy needs this at runtime for Mapped[datetime]
from typing import Any

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from relay_txstore.store.record import TransactionRecord

# Largest value a signed 64-bit INTEGER column holds
MAX_COLUMN_INT = 2**63 - 1


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for the txstore schema."""


class TimestampMixin:
    """Engine-maintained created / updated timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class StoredTransaction(Base, TimestampMixin):
    """One pending transaction, unique by ``tx_id`` and by ``(nonce, signer)``.

    ``signer`` duplicates the lowercased sender so the composite index never
    depends on the case the caller used.
    """

    __tablename__ = "transactions"
    __table_args__ = (
        UniqueConstraint("nonce", "signer", name="uq_transactions_nonce_signer"),
        CheckConstraint("nonce >= 0", name="ck_transactions_nonce"),
        CheckConstraint("attempts >= 1", name="ck_transactions_attempts"),
        CheckConstraint("gas >= 0", name="ck_transactions_gas"),
        CheckConstraint("gas_price >= 0", name="ck_transactions_gas_price"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tx_id: Mapped[str] = mapped_column(
        String(66), unique=True, nullable=False, comment="Transaction hash (lowercase hex)"
    )
    signer: Mapped[str] = mapped_column(
        String(42), nullable=False, index=True, comment="Lowercase sender address"
    )
    nonce: Mapped[int] = mapped_column(BigInteger, nullable=False)
    from_address: Mapped[str] = mapped_column(String(42), nullable=False)
    to_address: Mapped[str] = mapped_column(
        String(42), nullable=False, default="0x", comment="Recipient, 0x for contract creation"
    )
    gas: Mapped[int] = mapped_column(BigInteger, nullable=False, comment="Gas limit")
    gas_price: Mapped[int] = mapped_column(BigInteger, nullable=False, comment="Gas price in wei")
    data: Mapped[str] = mapped_column(Text, nullable=False, default="0x")
    value: Mapped[str] = mapped_column(
        String(66), nullable=False, default="0x", comment="Amount in wei, big-endian hex"
    )
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    v: Mapped[str | None] = mapped_column(String(66), nullable=True, default=None)
    r: Mapped[str | None] = mapped_column(String(66), nullable=True, default=None)
    s: Mapped[str | None] = mapped_column(String(66), nullable=True, default=None)

    @staticmethod
    def values_from_record(record: TransactionRecord) -> dict[str, Any]:
        """Column values for ``record``, which must already be canonical."""
        return {
            "tx_id": record.tx_id,
            "signer": record.signer,
            "nonce": record.nonce,
            "from_address": record.from_address,
            "to_address": record.to,
            "gas": record.gas,
            "gas_price": record.gas_price,
            "data": record.data,
            "value": record.value,
            "attempts": record.attempts,
            "v": record.v,
            "r": record.r,
            "s": record.s,
        }

    def to_record(self) -> TransactionRecord:
        return TransactionRecord(
            from_address=self.from_address,
            to=self.to_address,
            gas=self.gas,
            gas_price=self.gas_price,
            data=self.data,
            nonce=self.nonce,
            tx_id=self.tx_id,
            attempts=self.attempts,
            value=self.value,
            v=self.v,
            r=self.r,
            s=self.s,
        )

    def __repr__(self) -> str:
        return (
            f"<StoredTransaction signer={self.signer} nonce={self.nonce} "
            f"tx_id={self.tx_id[:18]}... attempts={self.attempts}>"
        )
