from urlhandler.aws._client import (
    Boto3ClientFactory,
    Boto3ObjectStoreClient,
    ClientFactory,
    ObjectStoreClient,
    translate_errors,
)
from urlhandler.aws._metadata import RemoteMetadata, RemoteObject
from urlhandler.aws._options import ConnectionOptions

__all__ = [
    "Boto3ClientFactory",
    "Boto3ObjectStoreClient",
    "ClientFactory",
    "ConnectionOptions",
    "ObjectStoreClient",
    "RemoteMetadata",
    "RemoteObject",
    "translate_errors",
]
