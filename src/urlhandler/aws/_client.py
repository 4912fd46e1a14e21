"""
Remote object store clients.

The connection code only depends on the ``ClientFactory`` and ``ObjectStoreClient``
protocols. ``Boto3ClientFactory`` is the default implementation for S3 and
S3-compatible stores.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, ReadTimeoutError
from botocore.exceptions import ConnectionError as BotoConnectionError

from urlhandler.aws._metadata import RemoteMetadata, RemoteObject
from urlhandler.aws._options import ConnectionOptions
from urlhandler.errors import (
    AccessDeniedError,
    ClientCreationError,
    ObjectNotFoundError,
    TransientFailureError,
)

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NoSuchBucket", "NotFound"})
_ACCESS_DENIED_CODES = frozenset(
    {"403", "AccessDenied", "Forbidden", "InvalidAccessKeyId", "SignatureDoesNotMatch"}
)
_TRANSIENT_CODES = frozenset(
    {
        "500",
        "502",
        "503",
        "504",
        "InternalError",
        "RequestTimeout",
        "ServiceUnavailable",
        "SlowDown",
        "Throttling",
        "ThrottlingException",
    }
)


class ObjectStoreClient(Protocol):
    def get_object_metadata(self, bucket: str, key: str) -> RemoteMetadata: ...

    def get_object(self, bucket: str, key: str) -> RemoteObject: ...


class ClientFactory(Protocol):
    def create(self, options: ConnectionOptions) -> ObjectStoreClient:
        """Return a client for ``options``, raising ClientCreationError on failure."""
        ...


@contextmanager
def translate_errors(bucket: str, key: str) -> Iterator[None]:
    """
    Map botocore errors onto urlhandler's remote error types.

    Missing objects, refused access and transient failures are translated; any
    other ClientError propagates unchanged.
    """
    target = f"{bucket}/{key}"
    try:
        yield
    except ClientError as exc:
        code = str(exc.response.get("Error", {}).get("Code", ""))
        status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode") or 0
        if code in _NOT_FOUND_CODES or status == 404:
            raise ObjectNotFoundError(f"Object not found: {target} ({code})") from exc
        if code in _ACCESS_DENIED_CODES or status == 403:
            raise AccessDeniedError(f"Access denied: {target} ({code})") from exc
        if code in _TRANSIENT_CODES or status >= 500:
            raise TransientFailureError(f"Transient failure for {target} ({code})") from exc
        raise
    except (BotoConnectionError, ReadTimeoutError) as exc:
        raise TransientFailureError(f"Transient failure for {target}: {exc}") from exc


class _ConnectionRelease:
    """Returns the HTTP connection behind a streaming body to its pool."""

    def __init__(self, body: Any) -> None:
        self._raw = getattr(body, "_raw_stream", None)

    def close(self) -> None:
        release = getattr(self._raw, "release_conn", None)
        if release is not None:
            release()


class Boto3ObjectStoreClient:
    def __init__(self, client: Any) -> None:
        self.client = client

    def __repr__(self) -> str:
        return f"Boto3ObjectStoreClient({self.client.meta.endpoint_url!r})"

    def get_object_metadata(self, bucket: str, key: str) -> RemoteMetadata:
        with translate_errors(bucket, key):
            response = self.client.head_object(Bucket=bucket, Key=key)
        return RemoteMetadata.from_response(response)

    def get_object(self, bucket: str, key: str) -> RemoteObject:
        with translate_errors(bucket, key):
            response = self.client.get_object(Bucket=bucket, Key=key)
        body = response["Body"]
        return RemoteObject(RemoteMetadata.from_response(response), body, _ConnectionRelease(body))


class Boto3ClientFactory:
    """
    Client factory creating and caching boto3 clients per ConnectionOptions.

    Credentials come from the options' profile, then its static keys, and otherwise
    from boto3's default credential chain. A region takes precedence over an
    endpoint.
    """

    def __init__(
        self,
        service_name: str = "s3",
        session_factory: Callable[..., Any] = boto3.session.Session,
    ) -> None:
        self.service_name = service_name
        self._session_factory = session_factory
        self._clients: dict[ConnectionOptions, Boto3ObjectStoreClient] = {}
        self._lock = threading.Lock()

    def create(self, options: ConnectionOptions) -> Boto3ObjectStoreClient:
        client = self._clients.get(options)
        if client is not None:
            return client
        client = Boto3ObjectStoreClient(self._create_client(options))
        with self._lock:
            return self._clients.setdefault(options, client)

    def _session_kwargs(self, options: ConnectionOptions) -> dict[str, Any]:
        if options.profile is not None:
            return {"profile_name": options.profile}
        if options.has_static_credentials:
            return {
                "aws_access_key_id": options.access_key_id,
                "aws_secret_access_key": options.secret_access_key,
            }
        return {}

    def _create_config(self, options: ConnectionOptions) -> Config:
        proxy_url = options.proxy_url
        if proxy_url is None:
            return Config()
        return Config(proxies={"http": proxy_url, "https": proxy_url})

    def _create_client(self, options: ConnectionOptions) -> Any:
        try:
            session = self._session_factory(**self._session_kwargs(options))
            client = session.client(
                self.service_name,
                region_name=options.region,
                endpoint_url=options.endpoint_url,
                config=self._create_config(options),
            )
        except (BotoCoreError, ValueError) as exc:
            msg = f"Can not instantiate {self.service_name} client: {exc}"
            raise ClientCreationError(msg) from exc
        logger.debug("Created %s client for %r", self.service_name, options)
        return client
