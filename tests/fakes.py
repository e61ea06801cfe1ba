"""In-memory transport and payload builders for exercising the pipeline without a network."""

from __future__ import annotations

import dataclasses
import io
import json
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qs, urlsplit

from bucket_client._transport import Response, Transport

if TYPE_CHECKING:
    from collections.abc import Mapping

    from bucket_client._types import Body

HOST = "https://bucket.test"
SESSION_PATH = "/api/v1/session"
NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def envelope(data: Any = None, *, success: bool = True, msg: str = "ok", err: str = "", code: int = 0) -> bytes:
    return json.dumps(
        {"version": 1, "success": success, "msg": msg, "code": code, "err": err, "data": data}
    ).encode()


def session_data(token: str = "tok-1", expiry: datetime = NOW + timedelta(hours=1), subject: int = 7) -> dict[str, Any]:
    return {
        "token": token,
        "issuedAt": NOW.isoformat().replace("+00:00", "Z"),
        "subject": subject,
        "expiry": expiry.isoformat().replace("+00:00", "Z"),
        "user": {"user_id": subject, "username": "alice"},
    }


def buckets(start: int, count: int) -> list[dict[str, Any]]:
    return [{"bucket_id": i, "alias": f"b{i}", "owner_id": 7} for i in range(start, start + count)]


class FakeClock:
    """Callable clock whose time the test sets explicitly."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@dataclasses.dataclass
class Sent:
    method: str
    url: str
    headers: dict[str, str]
    body: Body | None

    @property
    def path(self) -> str:
        return urlsplit(self.url).path

    @property
    def query(self) -> dict[str, list[str]]:
        return parse_qs(urlsplit(self.url).query)


class FakeTransport(Transport):
    """Transport that answers from per-route queues and records every request.

    Each route holds a queue of results: raw response bytes, a :class:`Response`,
    or an exception to raise. The last result of a queue is repeated.
    """

    def __init__(self) -> None:
        self.sent: list[Sent] = []
        self.closed = False
        self._routes: dict[tuple[str, str], list[object]] = {}

    @property
    def name(self) -> str:
        return "fake"

    def add(self, method: str, path: str, *results: object) -> None:
        self._routes.setdefault((method, path), []).extend(results)

    def replace(self, method: str, path: str, *results: object) -> None:
        self._routes[(method, path)] = list(results)

    def send(self, method: str, url: str, *, headers: Mapping[str, str], body: Body | None = None) -> Response:
        self.sent.append(Sent(method, url, dict(headers), body))
        queue = self._routes.get((method, urlsplit(url).path))
        if not queue:
            raise AssertionError(f"Unexpected request: {method} {url}")
        result = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(result, BaseException):
            raise result
        if isinstance(result, Response):
            return result
        assert isinstance(result, bytes)
        return Response(status=200, headers={"Content-Type": "application/json"}, body=io.BytesIO(result))

    def to(self, method: str, path: str) -> list[Sent]:
        return [s for s in self.sent if s.method == method and s.path == path]

    def close(self) -> None:
        self.closed = True
