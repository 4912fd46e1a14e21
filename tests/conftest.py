import urllib.request
from collections.abc import Iterator
from datetime import datetime, timezone

import pytest

from urlhandler.config import HandlerSettings
from urlhandler.s3 import S3ProtocolHandlerFactory
from urlhandler.testing.memory import MemoryObjectStore

LAST_MODIFIED = datetime(2016, 7, 15, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def memory_store() -> MemoryObjectStore:
    store = MemoryObjectStore()
    store.put(
        "mybucket",
        "a/b.txt",
        b"hello world",
        content_type="text/plain",
        etag='"5eb63bbbe01eeed093cb22bb8f5acdc3"',
        last_modified=LAST_MODIFIED,
        user_metadata={"owner": "raniz"},
    )
    return store


@pytest.fixture
def s3_factory(memory_store: MemoryObjectStore) -> S3ProtocolHandlerFactory:
    return S3ProtocolHandlerFactory(memory_store, settings=HandlerSettings())


@pytest.fixture
def opener_slot() -> Iterator[None]:
    """Start with no global urllib opener and restore the original afterwards."""
    saved = getattr(urllib.request, "_opener", None)
    urllib.request._opener = None
    try:
        yield
    finally:
        urllib.request._opener = saved
