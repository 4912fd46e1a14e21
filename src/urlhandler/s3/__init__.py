from urlhandler.s3._address import AddressSpec, known_regions, parse_address, parse_user_info
from urlhandler.s3._connection import UNKNOWN_DATE, ObjectInputStream, S3Connection
from urlhandler.s3._handler import S3ProtocolHandlerFactory, S3StreamHandler

__all__ = [
    "UNKNOWN_DATE",
    "AddressSpec",
    "ObjectInputStream",
    "S3Connection",
    "S3ProtocolHandlerFactory",
    "S3StreamHandler",
    "known_regions",
    "parse_address",
    "parse_user_info",
]
