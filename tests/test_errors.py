"""Tests for the error hierarchy."""

from __future__ import annotations

import pytest

from bucket_client._errors import (
    BucketClientError,
    DecodeError,
    Exhausted,
    RenewalFailed,
    ServerError,
    TransportError,
)


class TestBaseError:
    """BucketClientError carries optional endpoint and operation."""

    def test_default_attributes(self) -> None:
        e = BucketClientError("boom")
        assert e.endpoint is None
        assert e.operation is None
        assert str(e) == "boom"

    def test_with_attributes(self) -> None:
        e = BucketClientError("boom", endpoint="/api/v1/buckets", operation="GET")
        assert e.endpoint == "/api/v1/buckets"
        assert e.operation == "GET"


class TestServerError:
    """ServerError exposes the envelope fields."""

    def test_fields(self) -> None:
        e = ServerError("failed: denied (x)", msg="denied", err="x", code=403)
        assert e.msg == "denied"
        assert e.err == "x"
        assert e.code == 403

    def test_str_includes_code(self) -> None:
        assert "code=403" in str(ServerError("failed", code=403))

    def test_zero_code_omitted(self) -> None:
        assert "code" not in str(ServerError("failed"))


class TestRenewalFailed:
    """RenewalFailed keeps the underlying error."""

    def test_cause(self) -> None:
        cause = TransportError("refused")
        e = RenewalFailed("renewal failed", cause=cause)
        assert e.cause is cause

    def test_default_cause(self) -> None:
        assert RenewalFailed("x").cause is None


class TestExhausted:
    """Exhausted reports the offset it was raised at."""

    def test_offset(self) -> None:
        e = Exhausted("no more", endpoint="/api/v1/buckets/alice", offset=30)
        assert e.offset == 30
        assert "offset=30" in str(e)
        assert "offset=30" in repr(e)


class TestFlatHierarchy:
    """All errors inherit directly from BucketClientError."""

    def test_all_errors_inherit_directly_from_base(self) -> None:
        concrete = [TransportError, DecodeError, ServerError, RenewalFailed, Exhausted]
        for cls in concrete:
            bases = cls.__mro__
            assert bases[1] is BucketClientError, f"{cls.__name__} does not directly inherit BucketClientError"

    @pytest.mark.parametrize("cls", [TransportError, DecodeError, ServerError, RenewalFailed, Exhausted])
    def test_catchable_as_base(self, cls: type[BucketClientError]) -> None:
        with pytest.raises(BucketClientError):
            raise cls("x")


class TestStrRepr:
    """Meaningful str/repr output."""

    def test_str_includes_context(self) -> None:
        e = DecodeError("bad json", endpoint="/api/v1/users/@me", operation="GET")
        s = str(e)
        assert "/api/v1/users/@me" in s
        assert "GET" in s

    def test_repr_includes_class_name(self) -> None:
        e = TransportError("refused", endpoint="https://h/api")
        r = repr(e)
        assert "TransportError" in r
        assert "https://h/api" in r
