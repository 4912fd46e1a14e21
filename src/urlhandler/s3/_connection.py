from __future__ import annotations

import email.utils
import io
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, cast

from urlhandler.abc.connection import ConnectionAdapter
from urlhandler.aws._options import ConnectionOptions
from urlhandler.config import HandlerSettings
from urlhandler.s3._address import parse_address, parse_user_info

if TYPE_CHECKING:
    from urlhandler.aws._client import ClientFactory, ObjectStoreClient
    from urlhandler.aws._metadata import Closeable, RemoteMetadata

logger = logging.getLogger(__name__)

# Rendered in place of a missing expiry date.
UNKNOWN_DATE = "unknown"


def format_http_date(value: datetime) -> str:
    """Format ``value`` as an RFC 1123 date; naive values are taken to be UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return email.utils.format_datetime(value.astimezone(timezone.utc), usegmt=True)


def _optional_date(value: datetime | None) -> str | None:
    return format_http_date(value) if value is not None else None


_STANDARD_HEADERS: dict[str, tuple[str, Callable[[RemoteMetadata], str | None]]] = {
    "cache-control": ("Cache-Control", lambda m: m.cache_control),
    "content-disposition": ("Content-Disposition", lambda m: m.content_disposition),
    "content-encoding": ("Content-Encoding", lambda m: m.content_encoding),
    "content-length": ("Content-Length", lambda m: str(m.content_length)),
    "content-md5": ("Content-MD5", lambda m: m.content_md5),
    "content-type": ("Content-Type", lambda m: m.content_type),
    "etag": ("ETag", lambda m: m.etag),
    "last-modified": ("Last-Modified", lambda m: _optional_date(m.last_modified)),
    "expires": (
        "Expires",
        lambda m: format_http_date(m.expires) if m.expires is not None else UNKNOWN_DATE,
    ),
}


class ObjectInputStream(io.RawIOBase):
    """
    Byte stream over a remote object body that also owns the response handle.

    Closing releases the body and then the handle. Both are always attempted; if
    both fail the body's error is raised and the handle's error is logged and added
    to it as a note.
    """

    def __init__(
        self,
        body: Any,
        handle: Closeable,
        on_close: Callable[[], None] | None = None,
    ) -> None:
        super().__init__()
        self._body = body
        self._handle = handle
        self._on_close = on_close

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed stream")
        data = self._body.read(len(buffer))
        size = len(data)
        buffer[:size] = data
        return size

    def readall(self) -> bytes:
        if self.closed:
            raise ValueError("I/O operation on closed stream")
        return self._body.read()

    def close(self) -> None:
        if self.closed:
            return
        errors: list[Exception] = []
        for resource in (self._body, self._handle):
            try:
                resource.close()
            except Exception as exc:
                errors.append(exc)
        super().close()
        if self._on_close is not None:
            self._on_close()
        if errors:
            first, *rest = errors
            for extra in rest:
                logger.warning("Releasing the response handle also failed: %r", extra)
                first.add_note(f"Releasing the response handle also failed: {extra!r}")
            raise first


class S3Connection(ConnectionAdapter):
    """
    Connection to an object in S3 or an S3-compatible store.

    Connecting fetches the object's metadata; ``get_input_stream()`` fetches the
    object itself. Credentials come from the URL's user info, the region or endpoint
    from its host, and proxy settings from ``settings``.

    Remote errors raised by the client propagate unchanged.
    """

    def __init__(
        self,
        url: str,
        client_factory: ClientFactory,
        settings: HandlerSettings | None = None,
    ) -> None:
        super().__init__(url)
        self._client_factory = client_factory
        self._settings = settings if settings is not None else HandlerSettings()
        self.address = parse_address(url)
        self.options = self.create_options()
        self._client: ObjectStoreClient | None = None
        self._metadata: RemoteMetadata | None = None

    def create_options(self) -> ConnectionOptions:
        """The options used to obtain a client from the client factory."""
        profile, access_key_id, secret_access_key = parse_user_info(self.url)
        return ConnectionOptions(
            profile=profile,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            region=self.address.region,
            endpoint=self.address.endpoint,
            proxy_host=self._settings.proxy_host,
            proxy_port=self._settings.proxy_port,
            proxy_username=self._settings.proxy_username,
            proxy_password=self._settings.proxy_password,
        )

    def _connect(self) -> None:
        self._client = self._client_factory.create(self.options)
        self._metadata = self._client.get_object_metadata(self.address.bucket, self.address.key)

    def _open_stream(self) -> ObjectInputStream:
        client = cast("ObjectStoreClient", self._client)
        remote = client.get_object(self.address.bucket, self.address.key)
        return ObjectInputStream(remote.body, remote.handle, on_close=self._stream_closed)

    @property
    def metadata(self) -> RemoteMetadata:
        self._require_connected("metadata")
        return cast("RemoteMetadata", self._metadata)

    def get_content_length(self) -> int:
        return self.metadata.content_length

    def get_content_type(self) -> str | None:
        return self.metadata.content_type

    def get_content_encoding(self) -> str | None:
        return self.metadata.content_encoding

    def get_last_modified(self) -> datetime | None:
        return self.metadata.last_modified

    def get_expiration(self) -> datetime | None:
        return self.metadata.expires

    def get_header_field(self, name: str) -> str | None:
        metadata = self.metadata
        lookup = name.lower()
        standard = _STANDARD_HEADERS.get(lookup)
        if standard is not None:
            return standard[1](metadata)
        for key, value in metadata.user_metadata.items():
            if key.lower() == lookup:
                return value
        return None

    def get_header_fields(self) -> dict[str, list[str]]:
        metadata = self.metadata
        fields = {key: [value] for key, value in metadata.user_metadata.items()}
        for canonical, render in _STANDARD_HEADERS.values():
            value = render(metadata)
            if value is not None:
                fields[canonical] = [value]
        return fields
