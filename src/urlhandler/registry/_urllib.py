"""
Bridges between a PluggableRegistry and ``urllib.request``.

``RegistryHandler`` lets an ``OpenerDirector`` dispatch through a registry, and
``OpenerFallback`` lets a registry fall back to an existing opener.
"""

from __future__ import annotations

import email.message
import email.utils
import logging
import threading
import urllib.request
import urllib.response
from datetime import datetime
from typing import TYPE_CHECKING, Any, BinaryIO

from urlhandler.abc.connection import ConnectionAdapter
from urlhandler.abc.scheme_handler import SchemeStreamHandler

if TYPE_CHECKING:
    from urlhandler.registry._scheme_registry import PluggableRegistry

logger = logging.getLogger(__name__)


class RegistryHandler(urllib.request.BaseHandler):
    """
    urllib handler that opens URLs through a registry.

    ``default_open`` is consulted by the opener before any scheme-specific handler.
    When the registry has no handler for the request's scheme it returns None and
    the opener carries on with its other handlers.
    """

    def __init__(self, registry: PluggableRegistry) -> None:
        self.registry = registry

    def __repr__(self) -> str:
        return f"RegistryHandler({self.registry!r})"

    def default_open(self, req: urllib.request.Request) -> urllib.response.addinfourl | None:
        handler = self.registry.resolve(req.type)
        if handler is None:
            return None
        connection = handler.open_connection(req.full_url)
        connection.connect()
        stream = connection.get_input_stream()
        headers = email.message.Message()
        for name, values in connection.get_header_fields().items():
            for value in values:
                headers[name] = value
        logger.debug("Opened %s through %r", req.full_url, handler)
        return urllib.response.addinfourl(stream, headers, req.full_url, code=200)


def build_registry_opener(registry: PluggableRegistry) -> urllib.request.OpenerDirector:
    """Build an opener with urllib's default handlers plus a RegistryHandler."""
    return urllib.request.build_opener(RegistryHandler(registry))


def attached_registries(opener: urllib.request.OpenerDirector) -> list[PluggableRegistry]:
    """Registries already attached to ``opener`` through a RegistryHandler."""
    return [h.registry for h in getattr(opener, "handlers", ()) if isinstance(h, RegistryHandler)]


class OpenerConnection(ConnectionAdapter):
    """Connection backed by the response of an urllib-style opener."""

    def __init__(self, url: str, opener: Any) -> None:
        super().__init__(url)
        self._opener = opener
        self._response: Any = None
        self._headers: email.message.Message = email.message.Message()

    def _connect(self) -> None:
        self._response = self._opener.open(self.url)
        self._headers = self._response.info()

    def _open_stream(self) -> BinaryIO:
        # The response opened by connect() is handed out once; later streams reopen.
        response, self._response = self._response, None
        if response is None:
            response = self._opener.open(self.url)
        return response

    def close(self) -> None:
        response, self._response = self._response, None
        if response is not None:
            response.close()

    def _date_header(self, name: str) -> datetime | None:
        value = self.get_header_field(name)
        if value is None:
            return None
        try:
            return email.utils.parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return None

    def get_content_length(self) -> int:
        value = self.get_header_field("Content-Length")
        try:
            return int(value) if value is not None else -1
        except ValueError:
            return -1

    def get_content_type(self) -> str | None:
        return self.get_header_field("Content-Type")

    def get_content_encoding(self) -> str | None:
        return self.get_header_field("Content-Encoding")

    def get_last_modified(self) -> datetime | None:
        self._require_connected("get_last_modified")
        return self._date_header("Last-Modified")

    def get_expiration(self) -> datetime | None:
        self._require_connected("get_expiration")
        return self._date_header("Expires")

    def get_header_field(self, name: str) -> str | None:
        self._require_connected("get_header_field")
        return self._headers.get(name)

    def get_header_fields(self) -> dict[str, list[str]]:
        self._require_connected("get_header_fields")
        fields: dict[str, list[str]] = {}
        for name, value in self._headers.items():
            fields.setdefault(name, []).append(value)
        return fields


class OpenerStreamHandler(SchemeStreamHandler):
    def __init__(self, opener: Any) -> None:
        self.opener = opener

    def __repr__(self) -> str:
        return f"OpenerStreamHandler({self.opener!r})"

    def open_connection(self, url: str) -> OpenerConnection:
        return OpenerConnection(url, self.opener)


class OpenerFallback:
    """
    Dispatcher delegating to an existing opener.

    An ``OpenerDirector`` only claims the schemes it has handlers for, including
    schemes served by registries attached to it. Any other object with an
    ``open(url)`` method is assumed to handle every scheme.

    An attached registry may itself fall back to this opener. While its registries
    are being consulted, a nested lookup through the same fallback claims nothing.
    """

    def __init__(self, opener: Any) -> None:
        self.opener = opener
        self._local = threading.local()

    def __repr__(self) -> str:
        return f"OpenerFallback({self.opener!r})"

    def _claims(self, scheme: str) -> bool:
        handle_open = getattr(self.opener, "handle_open", None)
        if handle_open is None:
            return True
        if scheme in handle_open:
            return True
        if getattr(self._local, "resolving", False):
            return False
        self._local.resolving = True
        try:
            return any(
                registry.resolve(scheme) is not None
                for registry in attached_registries(self.opener)
            )
        finally:
            self._local.resolving = False

    def resolve(self, scheme: str) -> SchemeStreamHandler | None:
        if not self._claims(scheme):
            return None
        return OpenerStreamHandler(self.opener)
