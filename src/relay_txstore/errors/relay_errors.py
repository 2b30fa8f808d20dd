"""RelayError — base exception class for all relay txstore errors."""

from __future__ import annotations


class RelayError(Exception):
    """Base error for all transaction store operations.

    Attributes:
        message: Human-readable error description.
        status_code: Suggested HTTP status code for a transport layer.
        code: Machine-readable error code string.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 500,
        code: str = "relay-error",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
