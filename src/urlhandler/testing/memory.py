"""In-memory object store implementing both client factory and client protocols."""

from __future__ import annotations

import io
from typing import Any

from urlhandler.aws._metadata import RemoteMetadata, RemoteObject
from urlhandler.aws._options import ConnectionOptions
from urlhandler.errors import ObjectNotFoundError


class MemoryBody(io.BytesIO):
    def __init__(self, data: bytes, close_error: Exception | None = None) -> None:
        super().__init__(data)
        self.close_error = close_error
        self.close_calls = 0

    def close(self) -> None:
        self.close_calls += 1
        super().close()
        if self.close_error is not None:
            raise self.close_error


class MemoryHandle:
    def __init__(self, close_error: Exception | None = None) -> None:
        self.close_error = close_error
        self.closed = False

    def close(self) -> None:
        self.closed = True
        if self.close_error is not None:
            raise self.close_error


class MemoryObjectStore:
    """
    Object store kept in a dict.

    It records the options of every ``create`` call and every body and handle it
    hands out, and can be told to fail client creation or resource release.
    """

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], tuple[bytes, RemoteMetadata]] = {}
        self.created: list[ConnectionOptions] = []
        self.bodies: list[MemoryBody] = []
        self.handles: list[MemoryHandle] = []
        self.create_error: Exception | None = None
        self.body_close_error: Exception | None = None
        self.handle_close_error: Exception | None = None

    def put(self, bucket: str, key: str, data: bytes, **metadata: Any) -> RemoteMetadata:
        remote = RemoteMetadata(content_length=len(data), **metadata)
        self.objects[(bucket, key)] = (data, remote)
        return remote

    def create(self, options: ConnectionOptions) -> MemoryObjectStore:
        if self.create_error is not None:
            raise self.create_error
        self.created.append(options)
        return self

    def _lookup(self, bucket: str, key: str) -> tuple[bytes, RemoteMetadata]:
        try:
            return self.objects[(bucket, key)]
        except KeyError:
            raise ObjectNotFoundError(f"Object not found: {bucket}/{key}") from None

    def get_object_metadata(self, bucket: str, key: str) -> RemoteMetadata:
        return self._lookup(bucket, key)[1]

    def get_object(self, bucket: str, key: str) -> RemoteObject:
        data, remote = self._lookup(bucket, key)
        body = MemoryBody(data, self.body_close_error)
        handle = MemoryHandle(self.handle_close_error)
        self.bodies.append(body)
        self.handles.append(handle)
        return RemoteObject(remote, body, handle)
