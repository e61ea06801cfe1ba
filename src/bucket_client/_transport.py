"""Transport abstract base class: the HTTP contract beneath the pipeline."""

from __future__ import annotations

import abc
import dataclasses
from typing import TYPE_CHECKING, BinaryIO, TypeVar

if TYPE_CHECKING:
    from collections.abc import Mapping

    from bucket_client._types import Body

T = TypeVar("T")


@dataclasses.dataclass(frozen=True)
class Response:
    """A raw HTTP response, independent of its status.

    :param status: HTTP status code.
    :param headers: Response headers.
    :param body: Readable body stream. The reader is responsible for closing it.
    """

    status: int
    headers: Mapping[str, str]
    body: BinaryIO

    def read(self) -> bytes:
        """Read the full body and close the stream."""
        try:
            return self.body.read()
        finally:
            self.body.close()


class Transport(abc.ABC):
    """Abstract base class for HTTP transports.

    Transport-native exceptions must never leak: they must be mapped to
    :class:`~bucket_client.TransportError`.
    """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Unique identifier for this transport type (e.g. ``'requests'``)."""

    @abc.abstractmethod
    def send(self, method: str, url: str, *, headers: Mapping[str, str], body: Body | None = None) -> Response:
        """Send a request and return the response without interpreting its status.

        :raises TransportError: If the request could not be delivered.
        """

    def close(self) -> None:  # noqa: B027
        """Release resources. Default is a no-op."""

    def unwrap(self, type_hint: type[T]) -> T:
        """Return the native transport handle if it matches the requested type.

        :param type_hint: The expected type (e.g., ``requests.Session``).
        :raises TypeError: If the transport cannot provide the requested type.
        """
        raise TypeError(
            f"Transport '{self.name}' does not expose native handle of type {type_hint.__name__}. "
            f"Override unwrap() in your transport to provide native access."
        )
