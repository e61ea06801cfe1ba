"""Normalized error hierarchy for bucket_client."""

from __future__ import annotations

from typing import Optional


class BucketClientError(Exception):
    """Base class for all bucket_client errors.

    :param message: Human-readable error description.
    :param endpoint: The API path involved in the error, if any.
    :param operation: The operation that failed (e.g. ``"GET"``, ``"renew"``), if any.
    """

    def __init__(
        self, message: str = "", *, endpoint: Optional[str] = None, operation: Optional[str] = None
    ) -> None:
        self.endpoint = endpoint
        self.operation = operation
        super().__init__(message)

    def _context(self) -> list[str]:
        parts = []
        if self.endpoint is not None:
            parts.append(f"endpoint={self.endpoint!r}")
        if self.operation is not None:
            parts.append(f"operation={self.operation!r}")
        return parts

    def __str__(self) -> str:
        parts = [super().__str__(), *self._context()]
        return " | ".join(parts) if len(parts) > 1 else parts[0]

    def __repr__(self) -> str:
        cls = type(self).__name__
        args = [repr(self.args[0] if self.args else ""), *self._context()]
        return f"{cls}({', '.join(args)})"


class TransportError(BucketClientError):
    """Raised when the HTTP request cannot be delivered (connection, DNS, timeout)."""


class DecodeError(BucketClientError):
    """Raised for malformed JSON in the response envelope or its payload."""


class ServerError(BucketClientError):
    """Raised when the envelope reports failure or carries a soft error.

    :param msg: The envelope ``msg`` field.
    :param err: The envelope ``err`` field.
    :param code: The envelope ``code`` field.
    """

    def __init__(
        self,
        message: str = "",
        *,
        endpoint: Optional[str] = None,
        operation: Optional[str] = None,
        msg: str = "",
        err: str = "",
        code: int = 0,
    ) -> None:
        self.msg = msg
        self.err = err
        self.code = code
        super().__init__(message, endpoint=endpoint, operation=operation)

    def _context(self) -> list[str]:
        parts = super()._context()
        if self.code:
            parts.append(f"code={self.code!r}")
        return parts


class RenewalFailed(BucketClientError):
    """Raised when the session could not be renewed.

    :param cause: The underlying transport, decode, or server error.
    """

    def __init__(
        self,
        message: str = "",
        *,
        endpoint: Optional[str] = None,
        operation: Optional[str] = None,
        cause: Optional[BucketClientError] = None,
    ) -> None:
        self.cause = cause
        super().__init__(message, endpoint=endpoint, operation=operation)


class Exhausted(BucketClientError):
    """Raised when a page fetch succeeded but returned no items.

    This is the end-of-data signal for pagination, not a fault. The remote
    collection may grow, so fetching the same offset again is legitimate.

    :param offset: The offset at which the empty page was requested.
    """

    def __init__(
        self,
        message: str = "",
        *,
        endpoint: Optional[str] = None,
        operation: Optional[str] = None,
        offset: int = 0,
    ) -> None:
        self.offset = offset
        super().__init__(message, endpoint=endpoint, operation=operation)

    def _context(self) -> list[str]:
        return [*super()._context(), f"offset={self.offset!r}"]
