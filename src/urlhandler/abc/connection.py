"""Base class for connections produced by scheme handlers."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from datetime import datetime
from typing import BinaryIO

from urlhandler.errors import IllegalStateError


class ConnectionState(enum.Enum):
    UNCONNECTED = "unconnected"
    CONNECTED = "connected"
    STREAM_OPEN = "stream_open"
    CLOSED = "closed"


class ConnectionAdapter(ABC):
    """
    A logical connection to the resource named by one URL.

    Adapters start out ``UNCONNECTED``. ``connect()`` performs the remote call that
    fetches metadata, after which the header accessors and ``get_input_stream()``
    become available. Closing a stream returned by ``get_input_stream()`` moves the
    adapter to ``CLOSED``; metadata accessors keep working afterwards.

    Adapters are owned by a single caller and are not thread-safe.
    """

    def __init__(self, url: str) -> None:
        self.url = url
        self.state = ConnectionState.UNCONNECTED

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.url!r}, state={self.state.value})"

    @property
    def connected(self) -> bool:
        return self.state is not ConnectionState.UNCONNECTED

    def connect(self) -> None:
        """Establish the connection. Calling it on a connected adapter does nothing."""
        if self.connected:
            return
        self._connect()
        self.state = ConnectionState.CONNECTED

    def get_input_stream(self) -> BinaryIO:
        """Open the resource body as a byte stream."""
        self._require_connected("get_input_stream")
        stream = self._open_stream()
        self.state = ConnectionState.STREAM_OPEN
        return stream

    def _require_connected(self, operation: str) -> None:
        if not self.connected:
            raise IllegalStateError(f"{operation}() called before connect() on {self.url!r}")

    def close(self) -> None:
        """
        Release anything the adapter still holds.

        Streams already returned by ``get_input_stream()`` are owned by the caller
        and stay open. Does nothing by default.
        """

    def _stream_closed(self) -> None:
        self.state = ConnectionState.CLOSED

    @abstractmethod
    def _connect(self) -> None:
        """Perform the remote call that makes metadata available."""

    @abstractmethod
    def _open_stream(self) -> BinaryIO:
        """Open the body; only called on a connected adapter."""

    @abstractmethod
    def get_content_length(self) -> int:
        """Length of the body in bytes, or -1 when unknown."""

    @abstractmethod
    def get_content_type(self) -> str | None: ...

    @abstractmethod
    def get_content_encoding(self) -> str | None: ...

    @abstractmethod
    def get_last_modified(self) -> datetime | None: ...

    @abstractmethod
    def get_expiration(self) -> datetime | None: ...

    @abstractmethod
    def get_header_field(self, name: str) -> str | None:
        """Value of the header ``name`` (case-insensitive), or ``None``."""

    @abstractmethod
    def get_header_fields(self) -> dict[str, list[str]]:
        """All headers, each mapped to its list of values."""
