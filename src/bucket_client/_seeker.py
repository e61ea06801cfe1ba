"""Seeker: cursor-based, window-cached view over a list endpoint."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Generic, TypeVar
from urllib.parse import urlencode

from bucket_client._errors import Exhausted
from bucket_client._models import Bucket, Object, decode_records

if TYPE_CHECKING:
    from collections.abc import Iterator

    from bucket_client._pipeline import Pipeline
    from bucket_client._types import QueryParams

T = TypeVar("T", Bucket, Object)

log = logging.getLogger(__name__)

DEFAULT_LIMIT = 10


class Seeker(Generic[T]):
    """A windowed, cached reader over a remote collection of buckets or objects.

    The seeker keeps a read cursor (``offset``), a window size (``limit``) and
    a sparse cache of windows keyed by the offset they were requested at.
    :meth:`get_data` serves the window at the current offset from the cache
    when present; :meth:`next` always fetches and advances the cursor past
    what it received.

    Page boundaries on the server are kept aligned to multiples of ``limit``:
    a fetch at offset ``o`` asks for ``limit - o % limit`` items. After a
    :meth:`seek` to a misaligned offset, the first window is therefore short,
    and subsequent windows are aligned again.

    The cache is never evicted and is not invalidated by :meth:`set_params`
    or :meth:`set_limit`; call :meth:`clear` when the query changes.

    Cursor-advancing calls are not atomic with respect to each other. Drive
    :meth:`next` from one logical owner, or serialize externally. Concurrent
    callers may fetch the same window twice, which is harmless.

    :param pipeline: Pipeline used for every fetch.
    :param endpoint: API path of the list endpoint, without query string.
    :param item_type: Record type the endpoint returns (:class:`Bucket` or :class:`Object`).
    :param params: Fixed query parameters merged into every fetch.
    :param limit: Window size.
    """

    def __init__(
        self,
        pipeline: Pipeline,
        endpoint: str,
        item_type: type[T],
        params: QueryParams | None = None,
        *,
        limit: int = DEFAULT_LIMIT,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self._pipeline = pipeline
        self._endpoint = endpoint
        self._item_type = item_type
        self._params = dict(params) if params is not None else None
        self._limit = limit
        self._offset = 0
        self._cache: dict[int, tuple[T, ...]] = {}
        self._lock = threading.Lock()
        self._last_accessed: datetime | None = None
        self._last_fetched: datetime | None = None

    def __repr__(self) -> str:
        return (
            f"Seeker(endpoint={self._endpoint!r}, item_type={self._item_type.__name__}, "
            f"offset={self._offset}, limit={self._limit})"
        )

    # region: state accessors

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def item_type(self) -> type[T]:
        return self._item_type

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def params(self) -> dict[str, object] | None:
        return dict(self._params) if self._params is not None else None

    @property
    def last_accessed(self) -> datetime | None:
        return self._last_accessed

    @property
    def last_fetched(self) -> datetime | None:
        return self._last_fetched

    @property
    def cache(self) -> dict[int, tuple[T, ...]]:
        """Snapshot of the cached windows keyed by request offset."""
        with self._lock:
            return dict(self._cache)

    # endregion

    # region: cursor control

    def set_params(self, params: QueryParams | None) -> None:
        """Replace the fixed query parameters. Cached windows are kept."""
        self._params = dict(params) if params is not None else None

    def set_limit(self, limit: int) -> None:
        """Set the window size for subsequent fetches.

        :raises ValueError: If ``limit`` is less than 1.
        """
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self._limit = limit

    def seek(self, offset: int) -> None:
        """Move the cursor. The cache is untouched.

        :raises ValueError: If ``offset`` is negative.
        """
        if offset < 0:
            raise ValueError("offset must not be negative")
        self._offset = offset

    def clear(self) -> None:
        """Discard all cached windows, keeping offset and limit."""
        with self._lock:
            self._cache = {}

    # endregion

    # region: reading

    def get_data(self) -> tuple[T, ...]:
        """Return the window at the current offset, from cache if possible.

        A cached window is returned as is, even if it is shorter than
        ``limit``. On a miss this behaves like :meth:`next`.

        :raises Exhausted: On a miss, if the fetch returned no items.
        """
        self._last_accessed = datetime.now(timezone.utc)
        with self._lock:
            cached = self._cache.get(self._offset)
        if cached is not None:
            log.debug("Cache hit for %s at offset %d", self._endpoint, self._offset)
            return cached
        return self.next()

    def next(self) -> tuple[T, ...]:
        """Fetch the window at the current offset and advance past it.

        The cursor only moves when items were returned.

        :raises Exhausted: If the fetch succeeded but returned no items.
        """
        offset = self._offset
        data = self._load(offset)
        if not data:
            raise Exhausted("No more data to load", endpoint=self._endpoint, operation="next", offset=offset)
        self._offset = offset + len(data)
        return data

    def pages(self) -> Iterator[tuple[T, ...]]:
        """Yield successive windows via :meth:`next` until the collection is exhausted."""
        while True:
            try:
                yield self.next()
            except Exhausted:
                return

    def __iter__(self) -> Iterator[T]:
        for page in self.pages():
            yield from page

    def _load(self, offset: int) -> tuple[T, ...]:
        """Fetch one window at ``offset`` and cache it if non-empty."""
        self._last_fetched = datetime.now(timezone.utc)
        limit = self._limit
        params: dict[str, object] = dict(self._params) if self._params is not None else {}
        # Keep server-side windows aligned to multiples of limit.
        params["limit"] = str(limit - offset % limit)
        params["offset"] = str(offset)
        query = urlencode(sorted(params.items()), doseq=True)
        log.debug("Fetching %s limit=%s offset=%d", self._endpoint, params["limit"], offset)

        raw = self._pipeline.request("GET", f"{self._endpoint}?{query}")
        result = decode_records(self._item_type, raw)

        if result:
            with self._lock:
                self._cache[offset] = result
        return result

    # endregion
