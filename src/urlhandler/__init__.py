"""Pluggable URL scheme handlers for ``urllib`` and ``fsspec``."""

from urlhandler.abc import (
    ConnectionAdapter,
    ConnectionState,
    Dispatcher,
    ProtocolHandlerFactory,
    SchemeStreamHandler,
)
from urlhandler.config import HandlerSettings, load_settings
from urlhandler.errors import (
    AccessDeniedError,
    ClientCreationError,
    ConfigurationError,
    IllegalStateError,
    InstallationError,
    InvalidAddressError,
    InvalidArgumentError,
    ObjectNotFoundError,
    TransientFailureError,
    URLHandlerError,
)
from urlhandler.registry import PluggableRegistry, install, install_or_raise, register_fsspec

__version__ = "0.1.0"

__all__ = [
    "AccessDeniedError",
    "ClientCreationError",
    "ConfigurationError",
    "ConnectionAdapter",
    "ConnectionState",
    "Dispatcher",
    "HandlerSettings",
    "IllegalStateError",
    "InstallationError",
    "InvalidAddressError",
    "InvalidArgumentError",
    "ObjectNotFoundError",
    "PluggableRegistry",
    "ProtocolHandlerFactory",
    "SchemeStreamHandler",
    "TransientFailureError",
    "URLHandlerError",
    "install",
    "install_or_raise",
    "load_settings",
    "register_fsspec",
]
