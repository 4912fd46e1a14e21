from urlhandler.abc.connection import ConnectionAdapter, ConnectionState
from urlhandler.abc.scheme_handler import Dispatcher, ProtocolHandlerFactory, SchemeStreamHandler

__all__ = [
    "ConnectionAdapter",
    "ConnectionState",
    "Dispatcher",
    "ProtocolHandlerFactory",
    "SchemeStreamHandler",
]
