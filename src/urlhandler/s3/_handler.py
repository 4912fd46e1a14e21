from __future__ import annotations

from collections.abc import Iterable

from urlhandler.abc.scheme_handler import ProtocolHandlerFactory, SchemeStreamHandler
from urlhandler.aws._client import Boto3ClientFactory, ClientFactory
from urlhandler.config import HandlerSettings, load_settings
from urlhandler.s3._connection import S3Connection


class S3StreamHandler(SchemeStreamHandler):
    """Opens an S3Connection for each URL, sharing one client factory."""

    def __init__(
        self, client_factory: ClientFactory, settings: HandlerSettings | None = None
    ) -> None:
        self.client_factory = client_factory
        self.settings = settings if settings is not None else load_settings()

    def __repr__(self) -> str:
        return f"S3StreamHandler({self.client_factory!r})"

    def open_connection(self, url: str) -> S3Connection:
        return S3Connection(url, self.client_factory, self.settings)


class S3ProtocolHandlerFactory(ProtocolHandlerFactory):
    """
    Handler factory for ``s3://`` URLs, backed by boto3 unless told otherwise.

    Extra schemes such as ``s3a`` can be served by passing ``schemes``.
    """

    def __init__(
        self,
        client_factory: ClientFactory | None = None,
        settings: HandlerSettings | None = None,
        schemes: Iterable[str] = ("s3",),
    ) -> None:
        self.client_factory = client_factory if client_factory is not None else Boto3ClientFactory()
        self._schemes = tuple(schemes)
        self._handler = S3StreamHandler(self.client_factory, settings)

    def __repr__(self) -> str:
        return f"S3ProtocolHandlerFactory({self.client_factory!r}, schemes={self._schemes})"

    @property
    def schemes(self) -> tuple[str, ...]:
        return self._schemes

    def create_stream_handler(self, scheme: str) -> S3StreamHandler:
        return self._handler
