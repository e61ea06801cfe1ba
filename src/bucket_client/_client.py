"""BucketClient: the primary user-facing abstraction."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, BinaryIO
from urllib.parse import quote, urlencode

from bucket_client._models import Bucket, Object, User, decode_record, decode_records
from bucket_client._seeker import Seeker

if TYPE_CHECKING:
    from types import TracebackType

    from bucket_client._pipeline import Pipeline
    from bucket_client._types import Body, QueryParams


def _seg(value: str) -> str:
    """Percent-encode a single path segment.

    :raises ValueError: If ``value`` is empty.
    """
    if not value:
        raise ValueError("Path segment must not be empty")
    return quote(value, safe="")


def _query(params: QueryParams | None) -> str:
    if not params:
        return ""
    return "?" + urlencode(sorted(params.items()), doseq=True)


def _json_body(record: Bucket | Object | User) -> bytes:
    return json.dumps(record.to_dict()).encode("utf-8")


class BucketClient:
    """Client for the bucket storage API, scoped to the pipeline's account.

    "My" operations address resources of the authenticated user; "public"
    operations take the owning user's name explicitly.

    :param pipeline: The authenticated pipeline to send requests through.
    """

    def __init__(self, pipeline: Pipeline) -> None:
        self._pipeline = pipeline

    def __repr__(self) -> str:
        return f"BucketClient(host={self._pipeline.host!r}, username={self._pipeline.username!r})"

    @property
    def pipeline(self) -> Pipeline:
        return self._pipeline

    @property
    def username(self) -> str:
        return self._pipeline.username

    def close(self) -> None:
        """Close the underlying pipeline and transport."""
        self._pipeline.close()

    def __enter__(self) -> BucketClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    # region: user

    def me(self) -> User:
        """Fetch the authenticated user's record."""
        data = self._pipeline.request("GET", "/api/v1/users/@me")
        return decode_record(User, data)

    def update_me(self, user: User) -> User:
        """Update the authenticated user's record and return the stored version."""
        data = self._pipeline.request("PUT", "/api/v1/users/@me", body=_json_body(user))
        return decode_record(User, data)

    # endregion

    # region: buckets

    def create_bucket(self, bucket: Bucket) -> Bucket:
        data = self._pipeline.request("POST", "/api/v1/buckets", body=_json_body(bucket))
        return decode_record(Bucket, data)

    def get_my_bucket(self, query: str) -> Bucket:
        """Fetch one of the authenticated user's buckets by alias or id."""
        return self.get_public_bucket(self.username, query)

    def get_my_buckets(self, params: QueryParams | None = None) -> tuple[Bucket, ...]:
        return self.get_public_buckets(self.username, params)

    def get_public_bucket(self, user: str, query: str) -> Bucket:
        data = self._pipeline.request("GET", f"/api/v1/buckets/{_seg(user)}/{_seg(query)}")
        return decode_record(Bucket, data)

    def get_public_buckets(self, user: str, params: QueryParams | None = None) -> tuple[Bucket, ...]:
        data = self._pipeline.request("GET", f"/api/v1/buckets/{_seg(user)}{_query(params)}")
        return decode_records(Bucket, data)

    def update_bucket(self, query: str, bucket: Bucket) -> Bucket:
        data = self._pipeline.request("PUT", f"/api/v1/buckets/{_seg(query)}", body=_json_body(bucket))
        return decode_record(Bucket, data)

    def delete_bucket(self, query: str) -> None:
        self._pipeline.request("DELETE", f"/api/v1/buckets/{_seg(query)}")

    # endregion

    # region: objects

    def create_object(self, bucket: str, obj: Object) -> Object:
        data = self._pipeline.request("POST", f"/api/v1/objects/{_seg(bucket)}", body=_json_body(obj))
        return decode_record(Object, data)

    def get_my_object(self, bucket: str, query: str) -> Object:
        return self.get_public_object(self.username, bucket, query)

    def get_my_objects(self, bucket: str, params: QueryParams | None = None) -> tuple[Object, ...]:
        data = self._pipeline.request("GET", f"/api/v1/objects/{_seg(bucket)}{_query(params)}")
        return decode_records(Object, data)

    def get_public_object(self, user: str, bucket: str, query: str) -> Object:
        data = self._pipeline.request("GET", f"/api/v1/objects/{_seg(user)}/{_seg(bucket)}/{_seg(query)}")
        return decode_record(Object, data)

    def get_public_objects(self, user: str, bucket: str, params: QueryParams | None = None) -> tuple[Object, ...]:
        data = self._pipeline.request("GET", f"/api/v1/objects/{_seg(user)}/{_seg(bucket)}{_query(params)}")
        return decode_records(Object, data)

    def update_object(self, bucket: str, query: str, obj: Object) -> Object:
        data = self._pipeline.request(
            "PUT", f"/api/v1/objects/{_seg(bucket)}/{_seg(query)}", body=_json_body(obj)
        )
        return decode_record(Object, data)

    def delete_object(self, bucket: str, query: str) -> None:
        self._pipeline.request("DELETE", f"/api/v1/objects/{_seg(bucket)}/{_seg(query)}")

    # endregion

    # region: content

    def upload_object_content(self, bucket: str, query: str, content: Body, content_type: str = "") -> None:
        """Upload an object's content.

        :param content: Bytes or a binary stream, sent as the request body.
        :param content_type: MIME type. When empty, no headers are set and the
            pipeline default (``application/json``) applies.
        """
        headers = {"Content-Type": content_type} if content_type else None
        self._pipeline.request(
            "POST", f"/api/v1/objects/{_seg(bucket)}/{_seg(query)}/upload", headers=headers, body=content
        )

    def fetch_my_object_content(self, bucket: str, query: str) -> BinaryIO:
        """Open the content of one of the authenticated user's objects. The caller closes the stream."""
        return self.fetch_public_object_content(self.username, bucket, query)

    def fetch_public_object_content(self, user: str, bucket: str, query: str) -> BinaryIO:
        """Open the content of an object. The caller closes the stream.

        :raises ServerError: If the server answered with an error status.
        """
        return self._pipeline.stream("GET", f"/api/v1/objects/{_seg(user)}/{_seg(bucket)}/{_seg(query)}/content")

    # endregion

    # region: seekers

    def my_buckets(self, params: QueryParams | None = None) -> Seeker[Bucket]:
        """Return a seeker over the authenticated user's buckets."""
        return self.public_buckets(self.username, params)

    def public_buckets(self, user: str, params: QueryParams | None = None) -> Seeker[Bucket]:
        return Seeker(self._pipeline, f"/api/v1/buckets/{_seg(user)}", Bucket, params)

    def my_objects(self, bucket: str, params: QueryParams | None = None) -> Seeker[Object]:
        """Return a seeker over the objects in one of the authenticated user's buckets."""
        return Seeker(self._pipeline, f"/api/v1/objects/{_seg(bucket)}", Object, params)

    def public_objects(self, user: str, bucket: str, params: QueryParams | None = None) -> Seeker[Object]:
        return Seeker(self._pipeline, f"/api/v1/objects/{_seg(user)}/{_seg(bucket)}", Object, params)

    # endregion
