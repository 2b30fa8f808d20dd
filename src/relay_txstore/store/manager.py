"""Transaction store — durable bookkeeping of the relay's pending transactions.

Implements the slot lifecycle:
1. Put — insert a first attempt, or atomically replace the attempt occupying
   a ``(signer, nonce)`` slot
2. Query — point lookups by slot or hash, ordered listings per signer
3. Remove — drop a confirmed slot, or prune every slot up to a confirmed nonce
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.exc import IntegrityError, OperationalError

from relay_txstore.datastore.client import Datastore
from relay_txstore.datastore.migrations import run_auto_migrate
from relay_txstore.errors.store_errors import DuplicateKey, StorageIOError, ValidationError
from relay_txstore.store.models import MAX_COLUMN_INT, StoredTransaction
from relay_txstore.store.queries import (
    AllRecords,
    BySigner,
    BySignerNonceRange,
    BySlot,
    ByTxId,
    Query,
    where_clauses,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from types import TracebackType

    from relay_txstore.config.settings import StoreConfig
    from relay_txstore.store.record import TransactionRecord

logger = logging.getLogger(__name__)

# Columns that identify a slot and never change on replacement
_SLOT_COLUMNS = ("nonce", "signer")


@contextmanager
def _storage_errors(operation: str) -> Iterator[None]:
    """Surface database I/O failures as :class:`StorageIOError`."""
    try:
        yield
    except (OperationalError, OSError) as exc:
        logger.exception("txstore %s failed", operation)
        msg = f"txstore {operation} failed: {exc}"
        raise StorageIOError(msg) from exc


def _coerce_nonce(nonce: int | str) -> int:
    value: int | None = None
    if isinstance(nonce, int) and not isinstance(nonce, bool):
        value = nonce
    elif isinstance(nonce, str):
        try:
            value = int(nonce, 0) if nonce.lower().startswith("0x") else int(nonce)
        except ValueError:
            value = None
    if value is None or abs(value) > MAX_COLUMN_INT:
        msg = f"Invalid nonce: {nonce!r}"
        raise ValidationError(msg, field="nonce")
    return value


def _require_signer(signer: str) -> str:
    if not isinstance(signer, str) or not signer:
        msg = f"Invalid signer: {signer!r}"
        raise ValidationError(msg, field="signer")
    return signer.lower()


def _require_column_int(record: TransactionRecord, field: str) -> None:
    """``field`` must be an int that fits a signed 64-bit column and is not negative."""
    value = getattr(record, field)
    if value is None or isinstance(value, bool) or not isinstance(value, int):
        msg = f"Invalid tx: {field} must be an integer: {record!r}"
        raise ValidationError(msg, field=field)
    if value < 0:
        msg = f"Invalid tx: negative {field}: {record!r}"
        raise ValidationError(msg, field=field)
    if value > MAX_COLUMN_INT:
        msg = f"Invalid tx: {field} exceeds {MAX_COLUMN_INT}: {record!r}"
        raise ValidationError(msg, field=field)


def validate_record(record: TransactionRecord | None) -> TransactionRecord:
    """Check the fields :meth:`TransactionStore.put` relies on.

    Returns:
        The canonical (lowercased) record.

    Raises:
        ValidationError: If the record cannot be stored.
    """
    if record is None:
        msg = "Invalid tx: None"
        raise ValidationError(msg)
    if not record.tx_id:
        msg = f"Invalid tx: missing tx_id: {record!r}"
        raise ValidationError(msg, field="tx_id")
    if not record.from_address:
        msg = f"Invalid tx: missing from address: {record!r}"
        raise ValidationError(msg, field="from_address")
    for field in ("nonce", "gas", "gas_price"):
        _require_column_int(record, field)
    if (
        not isinstance(record.attempts, int)
        or record.attempts < 1
        or record.attempts > MAX_COLUMN_INT
    ):
        msg = f"Invalid tx: attempts must be between 1 and {MAX_COLUMN_INT}: {record!r}"
        raise ValidationError(msg, field="attempts")
    return record.canonical()


class TransactionStore:
    """Durable collection of :class:`TransactionRecord` keyed by hash and by slot.

    Usage::

        store = TransactionStore(StoreConfig(workdir="/var/lib/relay"))
        await store.open()
        await store.put(record)
        pending = await store.get_by_nonce(signer, nonce)
        await store.close()

    No in-process locking is done; every mutation is a single statement and
    the database serializes writes.
    """

    def __init__(self, config: StoreConfig, *, datastore: Datastore | None = None) -> None:
        self._config = config
        self._ds = datastore or Datastore(config)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        """Open the backing database and ensure both unique indexes exist.

        Raises:
            StorageIOError: If the database cannot be opened. The relay must
                not run without it.
        """
        with _storage_errors("open"):
            await self._ds.open()
            try:
                await run_auto_migrate(self._ds.engine)
            except Exception:
                await self._ds.close()
                raise
        logger.info("txstore created in %s", self._ds.location)

    async def close(self) -> None:
        await self._ds.close()

    async def __aenter__(self) -> TransactionStore:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    @property
    def is_open(self) -> bool:
        return self._ds.is_open

    @property
    def datastore(self) -> Datastore:
        return self._ds

    # ------------------------------------------------------------------
    # Put
    # ------------------------------------------------------------------

    async def put(self, record: TransactionRecord, update_existing: bool = False) -> None:
        """Store ``record`` in its ``(signer, nonce)`` slot.

        An empty slot is filled. An occupied slot is replaced in the same
        statement when ``update_existing`` is true; otherwise the insert is
        rejected by the composite index.

        Raises:
            ValidationError: If ``tx_id`` is missing, ``nonce``, ``gas`` or
                ``gas_price`` is not a non-negative 64-bit integer, or
                ``attempts`` is below 1.
            DuplicateKey: If the slot is occupied and replacement was not
                requested, or ``tx_id`` is already stored in another slot.
            StorageIOError: On database I/O failure.
        """
        canonical = validate_record(record)
        values = StoredTransaction.values_from_record(canonical)

        stmt = insert(StoredTransaction).values(**values)
        if update_existing:
            replacement = {
                column: stmt.excluded[column] for column in values if column not in _SLOT_COLUMNS
            }
            replacement["updated_at"] = func.now()
            stmt = stmt.on_conflict_do_update(
                index_elements=list(_SLOT_COLUMNS),
                set_=replacement,
            )

        with _storage_errors("put"):
            async with self._ds.session() as session:
                try:
                    await session.execute(stmt)
                    await session.commit()
                except IntegrityError as exc:
                    await session.rollback()
                    raise self._duplicate(canonical, update_existing, exc) from exc

        logger.debug(
            "txstore put signer=%s nonce=%d tx_id=%s attempts=%d replace=%s",
            canonical.signer,
            canonical.nonce,
            canonical.tx_id,
            canonical.attempts,
            update_existing,
        )

    @staticmethod
    def _duplicate(
        record: TransactionRecord, update_existing: bool, exc: IntegrityError
    ) -> DuplicateKey:
        if update_existing:
            msg = f"tx_id {record.tx_id} is already stored for another slot"
        else:
            msg = (
                f"slot signer={record.signer} nonce={record.nonce} or tx_id "
                f"{record.tx_id} is already stored"
            )
        logger.warning("txstore rejected duplicate: %s (%s)", msg, exc.orig)
        return DuplicateKey(msg, tx_id=record.tx_id, signer=record.signer, nonce=record.nonce)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def get_by_nonce(self, signer: str, nonce: int | str) -> TransactionRecord | None:
        """Return the record occupying ``(signer, nonce)``, or ``None``."""
        query = BySlot(_require_signer(signer), _coerce_nonce(nonce))
        return await self._find_one(query)

    async def get_by_id(self, tx_id: str) -> TransactionRecord | None:
        """Return the record whose hash is ``tx_id``, or ``None``."""
        if not isinstance(tx_id, str):
            msg = f"Invalid tx_id: {tx_id!r}"
            raise ValidationError(msg, field="tx_id")
        return await self._find_one(ByTxId(tx_id))

    async def list_by_signer(self, signer: str) -> list[TransactionRecord]:
        """All records of ``signer``, ascending by nonce."""
        return await self._find(BySigner(_require_signer(signer)))

    async def list_all(self) -> list[TransactionRecord]:
        """Every record, ascending by nonce; order across signers is incidental."""
        return await self._find(AllRecords())

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    async def remove_by_nonce(self, signer: str, nonce: int | str) -> int:
        """Delete whatever occupies ``(signer, nonce)``.

        Returns:
            Number of records deleted; zero is not an error.
        """
        query = BySlot(_require_signer(signer), _coerce_nonce(nonce))
        removed = await self._delete(query)
        logger.debug(
            "txstore removed %d tx(s) signer=%s nonce=%d", removed, query.signer, query.nonce
        )
        return removed

    async def remove_up_to(self, signer: str, nonce: int | str) -> int:
        """Delete every record of ``signer`` whose nonce is ``<= nonce``.

        Used once ``nonce`` is confirmed: anything lower that is still pending
        can never be mined.

        Returns:
            Number of records deleted.
        """
        query = BySignerNonceRange(_require_signer(signer), _coerce_nonce(nonce))
        removed = await self._delete(query)
        logger.debug(
            "txstore pruned %d tx(s) signer=%s up to nonce=%d",
            removed,
            query.signer,
            query.max_nonce,
        )
        return removed

    async def clear(self) -> int:
        """Delete every record. Administrative and test use only."""
        removed = await self._delete(AllRecords())
        logger.info("txstore cleared %d tx(s)", removed)
        return removed

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _find(self, query: Query) -> list[TransactionRecord]:
        stmt = (
            select(StoredTransaction)
            .where(*where_clauses(query))
            .order_by(StoredTransaction.nonce.asc(), StoredTransaction.id.asc())
        )
        with _storage_errors("find"):
            async with self._ds.session() as session:
                result = await session.execute(stmt)
                return [row.to_record() for row in result.scalars().all()]

    async def _find_one(self, query: Query) -> TransactionRecord | None:
        stmt = select(StoredTransaction).where(*where_clauses(query)).limit(1)
        with _storage_errors("find"):
            async with self._ds.session() as session:
                result = await session.execute(stmt)
                row = result.scalar_one_or_none()
        return row.to_record() if row is not None else None

    async def _delete(self, query: Query) -> int:
        stmt = delete(StoredTransaction).where(*where_clauses(query))
        with _storage_errors("remove"):
            async with self._ds.session() as session:
                result = await session.execute(stmt)
                await session.commit()
                return result.rowcount  # type: ignore[union-attr]
