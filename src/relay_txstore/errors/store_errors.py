"""Transaction store errors — validation, uniqueness, storage I/O."""

from __future__ import annotations

from relay_txstore.errors.relay_errors import RelayError


class ValidationError(RelayError):
    """A record is missing a required field or has one out of domain."""

    def __init__(self, message: str, *, field: str = "") -> None:
        super().__init__(message, status_code=400, code="invalid-tx")
        self.field = field


class DuplicateKey(RelayError):
    """A unique index (tx_id or the nonce/signer slot) rejected a write."""

    def __init__(self, message: str, *, tx_id: str = "", signer: str = "", nonce: int = -1) -> None:
        super().__init__(message, status_code=409, code="duplicate-key")
        self.tx_id = tx_id
        self.signer = signer
        self.nonce = nonce


class StorageIOError(RelayError):
    """The backing database could not be opened, read or written.

    Fatal: without durable tracking the relay may reuse a nonce it can no
    longer see.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=503, code="storage-io")
