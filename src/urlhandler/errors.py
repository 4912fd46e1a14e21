"""Exceptions raised by urlhandler.

Every error derives from :class:`URLHandlerError` and from the builtin exception
callers would naturally catch for the same condition.
"""


class URLHandlerError(Exception):
    """Base exception for all urlhandler errors."""


class InvalidArgumentError(URLHandlerError, ValueError):
    """Raised when a factory or fallback passed to a registry is unusable."""


class InvalidAddressError(URLHandlerError, ValueError):
    """Raised when a URL does not match its scheme's address grammar."""


class ConfigurationError(URLHandlerError, ValueError):
    """Raised when settings are invalid."""


class ClientCreationError(URLHandlerError, OSError):
    """Raised when a client factory can't produce a client instance."""


class IllegalStateError(URLHandlerError, RuntimeError):
    """Raised when a connection is used out of order."""


class ObjectNotFoundError(URLHandlerError, FileNotFoundError):
    """Raised when the remote object or its container does not exist."""


class AccessDeniedError(URLHandlerError, PermissionError):
    """Raised when the remote store refuses access."""


class TransientFailureError(URLHandlerError, ConnectionError):
    """Raised for remote failures that may succeed on a later attempt."""


class InstallationError(URLHandlerError, RuntimeError):
    """Raised when no installation strategy could install a registry."""
