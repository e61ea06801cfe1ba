"""Immutable wire models: the response envelope, session, and domain records."""

from __future__ import annotations

import dataclasses
import json
import re
from datetime import datetime, timezone
from typing import Any, TypeVar

from bucket_client._errors import DecodeError

T = TypeVar("T")

# RFC 3339 with optional fractional seconds of any precision.
_RFC3339 = re.compile(r"^(?P<base>[^.]+?)(?:\.(?P<frac>\d+))?(?P<tz>Z|[+-]\d{2}:\d{2})?$")


def parse_time(value: object) -> datetime | None:
    """Parse an RFC 3339 timestamp into an aware ``datetime``.

    Fractional seconds beyond microseconds are truncated. A missing zone is
    taken as UTC.

    :raises DecodeError: If ``value`` is not a valid timestamp string.
    """
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise DecodeError(f"Expected timestamp string, got {type(value).__name__}")
    m = _RFC3339.match(value)
    if m is None:
        raise DecodeError(f"Invalid timestamp: {value!r}")
    text = m.group("base")
    if m.group("frac"):
        text += "." + m.group("frac")[:6].ljust(6, "0")
    tz = m.group("tz")
    if tz and tz != "Z":
        text += tz
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise DecodeError(f"Invalid timestamp: {value!r}") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_time(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat().replace("+00:00", "Z")


def _require_mapping(raw: object, kind: str) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise DecodeError(f"Expected JSON object for {kind}, got {type(raw).__name__}")
    return raw


# Wire field readers: missing or null yields the zero value, a mistyped value is rejected.


def _mistyped(key: str, expected: str, value: object) -> DecodeError:
    return DecodeError(f"Field {key!r} must be {expected}, got {type(value).__name__}")


def _int(d: dict[str, Any], key: str) -> int:
    value = d.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise _mistyped(key, "an integer", value)
    return value


def _bool(d: dict[str, Any], key: str) -> bool:
    value = d.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise _mistyped(key, "a boolean", value)
    return value


def _str(d: dict[str, Any], key: str) -> str:
    value = d.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise _mistyped(key, "a string", value)
    return value


def _obj(d: dict[str, Any], key: str) -> dict[str, object]:
    value = d.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise _mistyped(key, "an object", value)
    return dict(value)


@dataclasses.dataclass(frozen=True)
class Envelope:
    """The uniform wrapper every API response is delivered in.

    :param version: API version.
    :param success: Whether the server considers the call successful.
    :param msg: Human-readable status message.
    :param code: Application status code.
    :param err: Error text; may be set even when ``success`` is ``True``.
    :param data: Arbitrary JSON payload.
    """

    version: int = 0
    success: bool = False
    msg: str = ""
    code: int = 0
    err: str = ""
    data: Any = None

    @classmethod
    def from_json(cls, raw: bytes) -> Envelope:
        """Decode an envelope from response bytes. Missing fields take their zero value.

        :raises DecodeError: If ``raw`` is not a JSON object or a field has the wrong JSON type.
        """
        try:
            parsed = json.loads(raw)
        except (ValueError, UnicodeDecodeError) as exc:
            raise DecodeError(f"Malformed response envelope: {exc}") from None
        obj = _require_mapping(parsed, "envelope")
        try:
            return cls(
                version=_int(obj, "version"),
                success=_bool(obj, "success"),
                msg=_str(obj, "msg"),
                code=_int(obj, "code"),
                err=_str(obj, "err"),
                data=obj.get("data"),
            )
        except DecodeError as exc:
            raise DecodeError(f"Malformed response envelope: {exc}") from None

    def payload(self) -> bytes:
        """Re-serialize ``data`` to raw JSON bytes for the caller to decode."""
        return json.dumps(self.data).encode("utf-8")


@dataclasses.dataclass(frozen=True)
class User:
    """An account on the storage service."""

    user_id: int = 0
    username: str = ""
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    gender: str = ""
    avatar: str = ""
    phone: str = ""
    address: str = ""
    country: str = ""
    zip_code: str = ""
    date_of_birth: datetime | None = None
    roles: int = 0
    metadata: dict[str, object] = dataclasses.field(default_factory=dict)
    updated_at: datetime | None = None
    joined_at: datetime | None = None

    @classmethod
    def from_dict(cls, raw: object) -> User:
        d = _require_mapping(raw, "user")
        return cls(
            user_id=_int(d, "user_id"),
            username=_str(d, "username"),
            email=_str(d, "email"),
            first_name=_str(d, "first_name"),
            last_name=_str(d, "last_name"),
            gender=_str(d, "gender"),
            avatar=_str(d, "avatar"),
            phone=_str(d, "phone"),
            address=_str(d, "address"),
            country=_str(d, "country"),
            zip_code=_str(d, "zip_code"),
            date_of_birth=parse_time(d.get("date_of_birth")),
            roles=_int(d, "roles"),
            metadata=_obj(d, "metadata"),
            updated_at=parse_time(d.get("updated_at")),
            joined_at=parse_time(d.get("joined_at")),
        )

    def to_dict(self) -> dict[str, object]:
        return _to_wire(self)


@dataclasses.dataclass(frozen=True)
class Session:
    """Bearer-token credential state with an absolute expiry.

    :param token: Bearer token attached to every authenticated request.
    :param issued_at: When the token was issued.
    :param subject: Identifier of the authenticated user.
    :param expiry: Absolute instant after which the token is invalid.
    :param user: The authenticated user's record.
    """

    token: str
    expiry: datetime
    issued_at: datetime | None = None
    subject: int = 0
    user: User = dataclasses.field(default_factory=User)

    @classmethod
    def from_dict(cls, raw: object) -> Session:
        d = _require_mapping(raw, "session")
        expiry = parse_time(d.get("expiry"))
        if expiry is None:
            raise DecodeError("Session payload has no expiry")
        user = d.get("user")
        return cls(
            token=_str(d, "token"),
            expiry=expiry,
            issued_at=parse_time(d.get("issuedAt")),
            subject=_int(d, "subject"),
            user=User.from_dict(user) if user is not None else User(),
        )

    def is_valid(self, now: datetime) -> bool:
        """Return ``True`` while ``now`` is strictly before the expiry."""
        return now < self.expiry


@dataclasses.dataclass(frozen=True)
class Bucket:
    """A named container of objects owned by a user."""

    bucket_id: int = 0
    alias: str = ""
    owner_id: int = 0
    is_public: bool = False
    metadata: dict[str, object] = dataclasses.field(default_factory=dict)
    updated_at: datetime | None = None
    created_at: datetime | None = None

    @classmethod
    def from_dict(cls, raw: object) -> Bucket:
        d = _require_mapping(raw, "bucket")
        return cls(
            bucket_id=_int(d, "bucket_id"),
            alias=_str(d, "alias"),
            owner_id=_int(d, "owner_id"),
            is_public=_bool(d, "is_public"),
            metadata=_obj(d, "metadata"),
            updated_at=parse_time(d.get("updated_at")),
            created_at=parse_time(d.get("created_at")),
        )

    def to_dict(self) -> dict[str, object]:
        return _to_wire(self)


@dataclasses.dataclass(frozen=True)
class Object:
    """A stored object's metadata record. Content is streamed separately."""

    object_id: int = 0
    alias: str = ""
    parent_id: int = 0
    is_public: bool = False
    content_type: str = ""
    sql_content_type: str = ""
    content_length: int = 0
    metadata: dict[str, object] = dataclasses.field(default_factory=dict)
    updated_at: datetime | None = None
    created_at: datetime | None = None

    @classmethod
    def from_dict(cls, raw: object) -> Object:
        d = _require_mapping(raw, "object")
        return cls(
            object_id=_int(d, "object_id"),
            alias=_str(d, "alias"),
            parent_id=_int(d, "parent_id"),
            is_public=_bool(d, "is_public"),
            content_type=_str(d, "content_type"),
            sql_content_type=_str(d, "sql_content_type"),
            content_length=_int(d, "content_length"),
            metadata=_obj(d, "metadata"),
            updated_at=parse_time(d.get("updated_at")),
            created_at=parse_time(d.get("created_at")),
        )

    def to_dict(self) -> dict[str, object]:
        return _to_wire(self)


def _to_wire(record: object) -> dict[str, object]:
    """Serialize a record to its JSON field layout, omitting unset timestamps."""
    out: dict[str, object] = {}
    for f in dataclasses.fields(record):  # type: ignore[arg-type]
        value = getattr(record, f.name)
        if value is None:
            continue
        if isinstance(value, datetime):
            value = format_time(value)
        elif isinstance(value, dict):
            value = dict(value)
        out[f.name] = value
    return out


def decode_json(raw: bytes) -> Any:
    """Decode a payload returned by the pipeline.

    :raises DecodeError: If ``raw`` is not valid JSON.
    """
    try:
        return json.loads(raw)
    except (ValueError, UnicodeDecodeError) as exc:
        raise DecodeError(f"Malformed payload: {exc}") from None


def decode_record(record_type: type[T], raw: bytes) -> T:
    """Decode a single JSON object payload into ``record_type``.

    :raises DecodeError: If the payload is malformed or has the wrong shape.
    """
    try:
        return record_type.from_dict(decode_json(raw))  # type: ignore[attr-defined,no-any-return]
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"Malformed {record_type.__name__} payload: {exc}") from None


def decode_records(record_type: type[T], raw: bytes) -> tuple[T, ...]:
    """Decode a JSON array payload into a tuple of ``record_type``. ``null`` decodes as empty.

    :raises DecodeError: If the payload is not an array of objects.
    """
    items = decode_json(raw)
    if items is None:
        return ()
    if not isinstance(items, list):
        raise DecodeError(f"Expected JSON array of {record_type.__name__}, got {type(items).__name__}")
    try:
        return tuple(record_type.from_dict(item) for item in items)  # type: ignore[attr-defined]
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"Malformed {record_type.__name__} payload: {exc}") from None
