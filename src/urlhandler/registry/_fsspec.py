"""
fsspec filesystem that opens URLs through a PluggableRegistry.

``register_fsspec`` registers a registry-bound filesystem class with fsspec for each
scheme, so that ``fsspec.open("s3://bucket/key")`` resolves through the same
factories and fallbacks as ``urllib``.
"""

from __future__ import annotations

import io
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

from fsspec import AbstractFileSystem, register_implementation

if TYPE_CHECKING:
    from urlhandler.abc.connection import ConnectionAdapter
    from urlhandler.registry._scheme_registry import PluggableRegistry


class PluggableFileSystem(AbstractFileSystem):
    """
    Read-only fsspec filesystem backed by a registry.

    Concrete subclasses are created by :func:`register_fsspec` with ``registry`` and
    ``protocol`` filled in. Paths are kept as full URLs because their authority
    carries scheme-specific addressing (credentials, bucket, region).
    """

    registry: PluggableRegistry | None = None
    protocol: tuple[str, ...] = ()
    cachable = False

    @classmethod
    def _strip_protocol(cls, path: Any) -> Any:
        if isinstance(path, list):
            return [cls._strip_protocol(p) for p in path]
        return str(path)

    def _connect(self, path: str) -> ConnectionAdapter:
        scheme = urlsplit(path).scheme or (self.protocol[0] if self.protocol else "")
        handler = self.registry.resolve(scheme) if self.registry is not None else None
        if handler is None:
            raise ValueError(f"No handler registered for scheme '{scheme}'")
        connection = handler.open_connection(path)
        connection.connect()
        return connection

    def _open(
        self,
        path: str,
        mode: str = "rb",
        block_size: int | None = None,
        autocommit: bool = True,
        cache_options: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> Any:
        if mode != "rb":
            raise NotImplementedError(f"{type(self).__name__} only supports mode 'rb'")
        stream = self._connect(path).get_input_stream()
        if isinstance(stream, io.RawIOBase):
            return io.BufferedReader(stream)
        return stream

    def info(self, path: str, **kwargs: Any) -> dict[str, Any]:
        path = self._strip_protocol(path)
        connection = self._connect(path)
        try:
            size = connection.get_content_length()
            return {
                "name": path,
                "size": size if size >= 0 else None,
                "type": "file",
                "ContentType": connection.get_content_type(),
                "LastModified": connection.get_last_modified(),
                "headers": connection.get_header_fields(),
            }
        finally:
            connection.close()


def register_fsspec(
    registry: PluggableRegistry,
    schemes: Iterable[str] | None = None,
    clobber: bool = True,
) -> type[PluggableFileSystem]:
    """
    Register ``registry`` with fsspec.

    Parameters
    ----------
    registry : PluggableRegistry
        The registry to open URLs through.
    schemes : Iterable[str], optional
        Schemes to register. Defaults to the registry's currently registered schemes;
        schemes served only by fallbacks must be listed explicitly.
    clobber : bool
        Replace implementations fsspec already has for these schemes.

    Returns
    -------
    type[PluggableFileSystem]
        The filesystem class registered for the schemes.

    Raises
    ------
    ValueError
        If ``clobber`` is False and fsspec already has another implementation.
    """
    protocol = tuple(s.lower() for s in (registry.schemes if schemes is None else schemes))
    cls = type(
        "RegistryFileSystem",
        (PluggableFileSystem,),
        {"registry": registry, "protocol": protocol},
    )
    for scheme in protocol:
        register_implementation(scheme, cls, clobber=clobber)
    return cls
