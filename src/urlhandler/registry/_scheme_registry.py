"""
Pluggable registry of scheme handler factories.

This module manages registration and lookup of ProtocolHandlerFactory instances
for URL schemes, with an ordered list of fallback dispatchers consulted when no
registered factory matches.
"""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Iterable
from typing import TYPE_CHECKING

from urlhandler.abc.scheme_handler import Dispatcher, ProtocolHandlerFactory
from urlhandler.errors import InvalidArgumentError

if TYPE_CHECKING:
    from urlhandler.abc.scheme_handler import SchemeStreamHandler

logger = logging.getLogger(__name__)

# RFC 3986: scheme = ALPHA *( ALPHA / DIGIT / "+" / "-" / "." )
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*$")


def _validate_scheme(scheme: object) -> str:
    if not scheme or not isinstance(scheme, str):
        raise InvalidArgumentError(f"Invalid scheme: {scheme!r}")
    if not _SCHEME_RE.match(scheme):
        raise InvalidArgumentError(f"Invalid scheme format: {scheme!r}")
    return scheme.lower()


class PluggableRegistry:
    """
    Registry for URL scheme handler factories and fallback dispatchers.

    Factories are keyed by lower-cased scheme and always take precedence over
    fallbacks. Fallbacks are consulted in the order they were added and the first
    non-``None`` handler wins.

    The registry is safe to share between threads. Writers serialise on a lock and
    publish fresh copies of the factory map and fallback list; readers only ever see
    a complete published copy and never take the lock.

    A registry is itself a dispatcher, so it can be added as another registry's
    fallback.
    """

    def __init__(
        self,
        factories: Iterable[ProtocolHandlerFactory] | None = None,
        fallbacks: Iterable[Dispatcher] | None = None,
    ) -> None:
        self._lock = threading.Lock()
        self._factories: dict[str, ProtocolHandlerFactory] = {}
        self._fallbacks: tuple[Dispatcher, ...] = ()
        for factory in factories or ():
            self.register_factory(factory)
        for fallback in fallbacks or ():
            self.add_fallback(fallback)

    @classmethod
    def with_factories(cls, factories: Iterable[ProtocolHandlerFactory]) -> PluggableRegistry:
        """Create a registry with a set of factories and no fallbacks."""
        return cls(factories=factories)

    @classmethod
    def with_fallbacks(cls, fallbacks: Iterable[Dispatcher]) -> PluggableRegistry:
        """Create a registry with a set of fallbacks and no factories."""
        return cls(fallbacks=fallbacks)

    def __repr__(self) -> str:
        return f"PluggableRegistry(schemes={self.schemes}, fallbacks={len(self._fallbacks)})"

    def register_factory(self, factory: ProtocolHandlerFactory) -> None:
        """
        Register a factory for every scheme it declares.

        Parameters
        ----------
        factory : ProtocolHandlerFactory
            The factory to register. A scheme already mapped to another factory is
            taken over by this one.

        Raises
        ------
        InvalidArgumentError
            If the factory is ``None`` or declares an invalid scheme. The registry is
            left unchanged.
        """
        if factory is None:
            raise InvalidArgumentError("Factory may not be None")
        schemes = [_validate_scheme(scheme) for scheme in factory.schemes]
        with self._lock:
            factories = dict(self._factories)
            for scheme in schemes:
                factories[scheme] = factory
            self._factories = factories
        logger.debug("Registered %r for schemes %s", factory, schemes)

    def unregister_factory(self, factory: ProtocolHandlerFactory) -> bool:
        """
        Remove every scheme currently mapped to ``factory``.

        Returns
        -------
        bool
            True if at least one scheme was removed.
        """
        with self._lock:
            factories = {s: f for s, f in self._factories.items() if f is not factory}
            removed = len(factories) != len(self._factories)
            self._factories = factories
        if removed:
            logger.debug("Unregistered %r", factory)
        return removed

    def add_fallback(self, fallback: Dispatcher, *, first: bool = False) -> None:
        """
        Add a dispatcher consulted when no factory matches a scheme.

        Parameters
        ----------
        fallback : Dispatcher
            The dispatcher to add.
        first : bool
            Insert ahead of the existing fallbacks instead of after them.

        Raises
        ------
        InvalidArgumentError
            If the fallback is ``None`` or has no ``resolve`` method.
        """
        if fallback is None:
            raise InvalidArgumentError("Fallback may not be None")
        if not isinstance(fallback, Dispatcher):
            raise InvalidArgumentError(f"Fallback must provide resolve(scheme): {fallback!r}")
        with self._lock:
            if first:
                self._fallbacks = (fallback, *self._fallbacks)
            else:
                self._fallbacks = (*self._fallbacks, fallback)
        logger.debug("Added fallback %r (first=%s)", fallback, first)

    def remove_fallback(self, fallback: Dispatcher) -> bool:
        """Remove ``fallback``; returns True if it was present."""
        with self._lock:
            fallbacks = tuple(f for f in self._fallbacks if f is not fallback)
            removed = len(fallbacks) != len(self._fallbacks)
            self._fallbacks = fallbacks
        return removed

    def resolve(self, scheme: str) -> SchemeStreamHandler | None:
        """
        Get a stream handler for a URL scheme.

        Parameters
        ----------
        scheme : str
            The URL scheme to look up, in any case.

        Returns
        -------
        SchemeStreamHandler | None
            The handler produced by the registered factory, else the first handler
            produced by a fallback, or None if nothing matches.
        """
        scheme = scheme.lower()
        factory = self._factories.get(scheme)
        if factory is not None:
            return factory.create_stream_handler(scheme)
        for fallback in self._fallbacks:
            handler = fallback.resolve(scheme)
            if handler is not None:
                return handler
        return None

    def can_handle(self, scheme: str) -> bool:
        """Check if a factory is registered for ``scheme``. Fallbacks are not consulted."""
        return scheme.lower() in self._factories

    @property
    def factories(self) -> dict[str, ProtocolHandlerFactory]:
        """Snapshot of the scheme to factory mapping."""
        return dict(self._factories)

    @property
    def fallbacks(self) -> list[Dispatcher]:
        """Snapshot of the fallback dispatchers, in consultation order."""
        return list(self._fallbacks)

    @property
    def schemes(self) -> list[str]:
        """Sorted list of schemes with a registered factory."""
        return sorted(self._factories)
