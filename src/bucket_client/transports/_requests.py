"""HTTP transport using requests."""

from __future__ import annotations

import io
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, TypeVar

from bucket_client._errors import BucketClientError, TransportError
from bucket_client._transport import Response, Transport

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping
    from contextlib import AbstractContextManager

    from bucket_client._types import Body

T = TypeVar("T")

log = logging.getLogger(__name__)

_CHUNK_SIZE = 65536


class _ResponseStream(io.RawIOBase):
    """Raw stream over ``Response.iter_content`` with errors mapped on every read."""

    def __init__(self, resp: Any, errors: Callable[[], AbstractContextManager[None]]) -> None:
        self._resp = resp
        self._chunks = resp.iter_content(chunk_size=_CHUNK_SIZE)
        self._pending = b""
        self._errors = errors

    def readable(self) -> bool:
        return True

    def readinto(self, buf: Any) -> int:
        if not self._pending:
            with self._errors():
                self._pending = next(self._chunks, b"")
        n = min(len(buf), len(self._pending))
        buf[:n] = self._pending[:n]
        self._pending = self._pending[n:]
        return n

    def close(self) -> None:
        if not self.closed:
            self._resp.close()
        super().close()


class RequestsTransport(Transport):
    """Synchronous HTTP transport backed by a ``requests.Session``.

    :param timeout: Per-request timeout in seconds (connect and read).
    :param verify: TLS verification flag or CA bundle path, passed to requests.
    :param session_options: Extra attributes set on the session (e.g. ``proxies``).
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        verify: bool | str = True,
        session_options: dict[str, Any] | None = None,
    ) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self._timeout = timeout
        self._verify = verify
        self._session_options = session_options or {}
        self._session_instance: Any = None

    @property
    def name(self) -> str:
        return "requests"

    # region: lazy session

    @property
    def _session(self) -> Any:
        if self._session_instance is None:
            import requests

            session = requests.Session()
            session.verify = self._verify
            for key, value in self._session_options.items():
                setattr(session, key, value)
            self._session_instance = session
        return self._session_instance

    # endregion

    # region: error mapping

    @contextmanager
    def _errors(self, method: str, url: str) -> Iterator[None]:
        """Map requests exceptions to bucket_client errors."""
        import requests

        try:
            yield
        except BucketClientError:
            raise
        except requests.RequestException as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}", endpoint=url, operation=method) from exc

    # endregion

    def send(self, method: str, url: str, *, headers: Mapping[str, str], body: Body | None = None) -> Response:
        log.debug("%s %s", method, url)
        with self._errors(method, url):
            resp = self._session.request(
                method,
                url,
                headers=dict(headers),
                data=body,
                stream=True,
                timeout=self._timeout,
            )
        stream = _ResponseStream(resp, lambda: self._errors(method, url))
        return Response(status=resp.status_code, headers=dict(resp.headers), body=io.BufferedReader(stream))

    # region: lifecycle

    def close(self) -> None:
        if self._session_instance is not None:
            self._session_instance.close()
            self._session_instance = None

    def unwrap(self, type_hint: type[T]) -> T:
        import requests

        if type_hint is requests.Session:
            return self._session  # type: ignore[no-any-return]
        return super().unwrap(type_hint)

    # endregion
