from __future__ import annotations

import email.utils
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, BinaryIO, Protocol


def _as_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return email.utils.parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return None
    return None


@dataclass(frozen=True)
class RemoteMetadata:
    """Descriptive attributes of a remote object, obtainable without its body."""

    content_length: int = 0
    content_type: str | None = None
    content_encoding: str | None = None
    cache_control: str | None = None
    content_disposition: str | None = None
    content_md5: str | None = None
    etag: str | None = None
    last_modified: datetime | None = None
    expires: datetime | None = None
    user_metadata: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_response(cls, response: Mapping[str, Any]) -> RemoteMetadata:
        """Build metadata from a boto3 ``head_object`` or ``get_object`` response."""
        # Recent botocore versions leave unparsable dates in ExpiresString only.
        expires = _as_datetime(response.get("Expires")) or _as_datetime(
            response.get("ExpiresString")
        )
        return cls(
            content_length=int(response.get("ContentLength") or 0),
            content_type=response.get("ContentType"),
            content_encoding=response.get("ContentEncoding"),
            cache_control=response.get("CacheControl"),
            content_disposition=response.get("ContentDisposition"),
            content_md5=response.get("ContentMD5"),
            etag=response.get("ETag"),
            last_modified=_as_datetime(response.get("LastModified")),
            expires=expires,
            user_metadata={str(k): str(v) for k, v in (response.get("Metadata") or {}).items()},
        )


class Closeable(Protocol):
    def close(self) -> None: ...


@dataclass
class RemoteObject:
    """
    A fetched object: its metadata, its body stream and the response handle.

    The body and the handle are separate resources and both must be released.
    """

    metadata: RemoteMetadata
    body: BinaryIO
    handle: Closeable
