"""Pipeline: session-authenticated request execution and envelope decoding."""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, BinaryIO, TypeVar

from bucket_client._errors import BucketClientError, DecodeError, RenewalFailed, ServerError, TransportError
from bucket_client._models import Envelope, Session, decode_record

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from bucket_client._transport import Response, Transport
    from bucket_client._types import Body, Headers

E = TypeVar("E", bound=BucketClientError)

log = logging.getLogger(__name__)

DEFAULT_SESSION_ENDPOINT = "/api/v1/session"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Pipeline:
    """Executes API calls with a fresh bearer token and unwraps the response envelope.

    One pipeline owns one set of credentials and the single :class:`Session`
    derived from them. The session is renewed lazily: every request first
    checks the stored expiry and re-authenticates when it has passed.

    Concurrent callers that all find the session expired may each renew it;
    the last successful renewal wins. After :meth:`ensure_session` returns,
    some valid session is in effect, not necessarily the one this call
    obtained.

    :param host: Base URL of the service (e.g. ``"https://bucket.example.com"``).
    :param username: Account name used for renewal and for ``@me``-style paths.
    :param password: Account password used for renewal.
    :param transport: The HTTP transport to send requests through.
    :param session_endpoint: Path of the session (login) endpoint.
    :param expiry_leeway: Treat the session as expired this long before its expiry.
    :param clock: Returns the current aware ``datetime``; defaults to UTC now.
    """

    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        transport: Transport,
        *,
        session_endpoint: str = DEFAULT_SESSION_ENDPOINT,
        expiry_leeway: timedelta = timedelta(0),
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if not host or not host.strip():
            raise ValueError("host must be a non-empty string")
        if expiry_leeway < timedelta(0):
            raise ValueError("expiry_leeway must not be negative")
        self._host = host.rstrip("/")
        self._username = username
        self._password = password
        self._transport = transport
        self._session_endpoint = session_endpoint
        self._expiry_leeway = expiry_leeway
        self._clock = clock or _utcnow
        self._session: Session | None = None
        self._session_lock = threading.Lock()
        self._trace: list[BucketClientError] = []
        self._trace_lock = threading.Lock()

    def __repr__(self) -> str:
        return f"Pipeline(host={self._host!r}, username={self._username!r}, transport={self._transport.name!r})"

    @property
    def host(self) -> str:
        return self._host

    @property
    def username(self) -> str:
        return self._username

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def session(self) -> Session | None:
        """The current session, or ``None`` before the first renewal."""
        with self._session_lock:
            return self._session

    @property
    def errors(self) -> tuple[BucketClientError, ...]:
        """Snapshot of every error raised by this pipeline, oldest first. Diagnostic only."""
        with self._trace_lock:
            return tuple(self._trace)

    def _record(self, exc: E) -> E:
        with self._trace_lock:
            self._trace.append(exc)
        return exc

    # region: session

    def is_valid_session(self) -> bool:
        """Return ``True`` if a session exists and has not reached its expiry."""
        session = self.session
        if session is None:
            return False
        return session.is_valid(self._clock() + self._expiry_leeway)

    def ensure_session(self) -> None:
        """Renew the session if it is absent or expired.

        :raises RenewalFailed: If renewal was needed and failed.
        """
        if not self.is_valid_session():
            self.renew_session()

    def renew_session(self) -> Session:
        """Authenticate with the stored credentials and replace the session.

        The stored session is replaced only on success.

        :raises RenewalFailed: If the call fails, the envelope reports failure,
            or the payload is not a session.
        """
        body = json.dumps({"username": self._username, "password": self._password}).encode("utf-8")
        try:
            data = self._call("POST", self._session_endpoint, None, body)
            session = decode_record(Session, data)
        except BucketClientError as exc:
            log.warning("Session renewal for %r failed: %s", self._username, exc)
            raise self._record(
                RenewalFailed(
                    f"Session renewal failed: {exc}",
                    endpoint=self._session_endpoint,
                    operation="renew",
                    cause=exc,
                )
            ) from exc
        with self._session_lock:
            self._session = session
        log.info("Session renewed for %r, expires at %s", self._username, session.expiry.isoformat())
        return session

    # endregion

    # region: requests

    def request(self, method: str, path: str, headers: Headers | None = None, body: Body | None = None) -> bytes:
        """Perform an authenticated API call and return the envelope ``data`` as JSON bytes.

        :param method: HTTP method.
        :param path: API path including any query string.
        :param headers: Request headers. When omitted and ``body`` is given,
            ``Content-Type: application/json`` is sent. A caller ``Authorization``
            header is sent only while the session has no token; otherwise
            ``Bearer <token>`` replaces it.
        :param body: Request body.
        :raises RenewalFailed: If the session could not be renewed; nothing is sent.
        :raises TransportError: If the request could not be delivered.
        :raises DecodeError: If the response is not a JSON envelope.
        :raises ServerError: If the envelope reports failure or a soft error.
        """
        self.ensure_session()
        return self._call(method, path, headers, body)

    def stream(self, method: str, path: str, headers: Headers | None = None, body: Body | None = None) -> BinaryIO:
        """Perform an authenticated call and return the raw response body.

        Used for content downloads, which are not wrapped in an envelope.
        Error responses (status 400 and above) are decoded as envelopes.

        :raises RenewalFailed: If the session could not be renewed; nothing is sent.
        :raises TransportError: If the request could not be delivered.
        :raises ServerError: If the server answered with an error status.
        """
        self.ensure_session()
        resp = self._send(method, path, headers, body)
        if resp.status < 400:
            return resp.body
        raw = self._read(resp)
        try:
            envelope = Envelope.from_json(raw)
        except DecodeError:
            raise self._record(
                ServerError(f"HTTP {resp.status}", endpoint=path, operation=method, code=resp.status)
            ) from None
        raise self._record(self._server_error(envelope, method, path, failed=True))

    def _call(self, method: str, path: str, headers: Headers | None, body: Body | None) -> bytes:
        """Send without session checks and unwrap the envelope."""
        resp = self._send(method, path, headers, body)
        raw = self._read(resp)
        try:
            envelope = Envelope.from_json(raw)
        except DecodeError as exc:
            raise self._record(DecodeError(str(exc.args[0]), endpoint=path, operation=method)) from None

        # Envelope failure takes precedence over an in-band error string.
        if not envelope.success:
            raise self._record(self._server_error(envelope, method, path, failed=True))
        if envelope.err:
            raise self._record(self._server_error(envelope, method, path, failed=False))
        return envelope.payload()

    def _send(self, method: str, path: str, headers: Headers | None, body: Body | None) -> Response:
        final: dict[str, str] = {}
        if headers is not None:
            final = dict(headers)
        elif body is not None:
            final["Content-Type"] = "application/json"
        session = self.session
        if session is not None and session.token:
            # Header names are case-insensitive; the session token replaces any caller value.
            final = {k: v for k, v in final.items() if k.lower() != "authorization"}
            final["Authorization"] = f"Bearer {session.token}"
        try:
            return self._transport.send(method, self._host + path, headers=final, body=body)
        except TransportError as exc:
            self._record(exc)
            raise

    def _read(self, resp: Response) -> bytes:
        try:
            return resp.read()
        except TransportError as exc:
            self._record(exc)
            raise

    @staticmethod
    def _server_error(envelope: Envelope, method: str, path: str, *, failed: bool) -> ServerError:
        if failed:
            message = f"failed: {envelope.msg} ({envelope.err})"
        else:
            message = f"{envelope.msg} (err: {envelope.err})"
        return ServerError(
            message,
            endpoint=path,
            operation=method,
            msg=envelope.msg,
            err=envelope.err,
            code=envelope.code,
        )

    # endregion

    # region: lifecycle

    def close(self) -> None:
        """Close the underlying transport."""
        self._transport.close()

    def __enter__(self) -> Pipeline:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    # endregion
