"""Type aliases used throughout bucket_client."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import BinaryIO, Union

Body = BinaryIO | bytes
Headers = Mapping[str, str]
QueryParams = Mapping[str, Union[str, int, Sequence[str]]]  # noqa: UP007
Metadata = dict[str, object]
