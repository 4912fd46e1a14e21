"""
Abstract base classes for scheme handlers.

A ``ProtocolHandlerFactory`` declares the URL schemes it supports and produces a
``SchemeStreamHandler`` for one of them; the stream handler turns a single URL into
a ``ConnectionAdapter``. Anything exposing ``resolve(scheme)`` is a ``Dispatcher``
and can be used as a registry fallback.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from urlhandler.abc.connection import ConnectionAdapter


class SchemeStreamHandler(ABC):
    """
    Scheme-level handler that opens connections for URLs of its scheme.

    Implementations should be stateless across calls so that one instance can
    serve any number of URLs.
    """

    @abstractmethod
    def open_connection(self, url: str) -> ConnectionAdapter:
        """
        Create an unconnected adapter bound to ``url``.

        Parameters
        ----------
        url : str
            The URL to open.

        Returns
        -------
        ConnectionAdapter
            A new adapter; the caller calls ``connect()`` on it.
        """


class ProtocolHandlerFactory(ABC):
    """
    Abstract base class for factories producing stream handlers.

    Examples
    --------
    >>> class MemoryHandlerFactory(ProtocolHandlerFactory):
    ...     schemes = ("mem",)
    ...
    ...     def create_stream_handler(self, scheme: str) -> SchemeStreamHandler:
    ...         return MemoryStreamHandler()
    """

    @property
    @abstractmethod
    def schemes(self) -> Iterable[str]:
        """The URL schemes this factory supports (e.g. ``("s3",)``)."""

    @abstractmethod
    def create_stream_handler(self, scheme: str) -> SchemeStreamHandler:
        """
        Create a stream handler for one of the supported schemes.

        Parameters
        ----------
        scheme : str
            A lower-cased scheme taken from ``schemes``.

        Returns
        -------
        SchemeStreamHandler
            The handler for ``scheme``.
        """


@runtime_checkable
class Dispatcher(Protocol):
    """Anything that can produce a stream handler for a scheme name, or ``None``."""

    def resolve(self, scheme: str) -> SchemeStreamHandler | None: ...
