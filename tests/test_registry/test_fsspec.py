"""Tests for opening registry URLs through fsspec."""

import email.message
import io
import urllib.response
from collections.abc import Iterator

import fsspec
import pytest
from fsspec.registry import _registry as fsspec_registry

from urlhandler.config import HandlerSettings
from urlhandler.registry import (
    OpenerFallback,
    PluggableFileSystem,
    PluggableRegistry,
    register_fsspec,
)
from urlhandler.s3 import S3ProtocolHandlerFactory
from urlhandler.testing.memory import MemoryObjectStore

SCHEME = "s3mem"
URL = f"{SCHEME}://mybucket.us-west-2/a/b.txt"
OPENER_SCHEME = "s3legacy"


class RecordingOpener:
    """Opener-like object keeping every body it hands out."""

    def __init__(self) -> None:
        self.bodies: list[io.BytesIO] = []

    def open(self, url: str) -> urllib.response.addinfourl:
        self.bodies.append(io.BytesIO(b"from opener"))
        headers = email.message.Message()
        headers["Content-Length"] = "11"
        return urllib.response.addinfourl(self.bodies[-1], headers, url, code=200)


@pytest.fixture
def registry(memory_store: MemoryObjectStore) -> Iterator[PluggableRegistry]:
    factory = S3ProtocolHandlerFactory(memory_store, HandlerSettings(), schemes=[SCHEME])
    yield PluggableRegistry.with_factories([factory])
    fsspec_registry.pop(SCHEME, None)
    fsspec_registry.pop(OPENER_SCHEME, None)


class TestRegisterFsspec:
    def test_open(self, registry: PluggableRegistry) -> None:
        cls = register_fsspec(registry)

        assert issubclass(cls, PluggableFileSystem)
        assert fsspec.get_filesystem_class(SCHEME) is cls
        with fsspec.open(URL, "rb") as f:
            assert f.read() == b"hello world"

    def test_open_text(self, registry: PluggableRegistry) -> None:
        register_fsspec(registry)

        with fsspec.open(URL, "r") as f:
            assert f.read() == "hello world"

    def test_info(self, registry: PluggableRegistry) -> None:
        fs = register_fsspec(registry)()

        info = fs.info(URL)
        assert info["size"] == 11
        assert info["type"] == "file"
        assert info["ContentType"] == "text/plain"
        assert fs.exists(URL)
        assert not fs.exists(f"{SCHEME}://mybucket.us-west-2/missing")

    def test_read_only(self, registry: PluggableRegistry) -> None:
        fs = register_fsspec(registry)()

        with pytest.raises(NotImplementedError):
            fs.open(URL, "wb")

    def test_no_clobber(self, registry: PluggableRegistry) -> None:
        register_fsspec(registry)

        with pytest.raises(ValueError):
            register_fsspec(PluggableRegistry(), schemes=[SCHEME], clobber=False)

    def test_scheme_without_handler(self, registry: PluggableRegistry) -> None:
        fs = register_fsspec(PluggableRegistry(), schemes=[SCHEME])()

        with pytest.raises(ValueError, match="No handler registered"):
            fs.info(URL)

    def test_info_releases_response(self, registry: PluggableRegistry) -> None:
        """Test info() closes the response it opened to read headers."""
        opener = RecordingOpener()
        registry.add_fallback(OpenerFallback(opener))
        fs = register_fsspec(registry, schemes=[OPENER_SCHEME])()

        assert fs.info(f"{OPENER_SCHEME}://host/obj")["size"] == 11
        assert opener.bodies
        assert all(body.closed for body in opener.bodies)
