"""
Address grammar for S3 URLs.

    s3://[userinfo@]bucket[.region-or-endpoint][:port]/key

The last dotted segment of the host is a region when it names a known S3 region.
Otherwise everything after the bucket's first dot is a literal endpoint host, and
the URL port, if any, belongs to that endpoint.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import AbstractSet
from urllib.parse import unquote, urlsplit

import boto3

from urlhandler.errors import InvalidAddressError

_BUCKET_RE = re.compile(r"[a-z0-9][a-z0-9._-]*")


@lru_cache(maxsize=1)
def known_regions() -> frozenset[str]:
    """S3 regions across all partitions, from botocore's endpoint data."""
    session = boto3.session.Session()
    regions: set[str] = set()
    for partition in session.get_available_partitions():
        regions.update(session.get_available_regions("s3", partition_name=partition))
    return frozenset(region.lower() for region in regions)


@dataclass(frozen=True)
class AddressSpec:
    bucket: str
    key: str
    region: str | None = None
    endpoint: str | None = None


def parse_address(url: str, regions: AbstractSet[str] | None = None) -> AddressSpec:
    """
    Split a URL into bucket, key and region or endpoint.

    Parameters
    ----------
    url : str
        The URL to parse.
    regions : AbstractSet[str], optional
        Lower-case region names to match the host suffix against. Defaults to
        :func:`known_regions`.

    Returns
    -------
    AddressSpec
        The parsed address. At most one of ``region`` and ``endpoint`` is set.

    Raises
    ------
    InvalidAddressError
        If the host does not match the ``bucket[.region-or-endpoint]`` grammar.
    """
    try:
        parts = urlsplit(url)
        host = parts.hostname
        port = parts.port
    except ValueError as exc:
        raise InvalidAddressError(f"Invalid URL {url!r}: {exc}") from exc
    if not host:
        raise InvalidAddressError(f"Missing bucket name in {url!r}")
    if regions is None:
        regions = known_regions()

    region = endpoint = None
    name, dot, suffix = host.rpartition(".")
    if dot and suffix in regions:
        bucket, region = name, suffix
    elif "." in host:
        bucket, _, endpoint = host.partition(".")
        if not endpoint:
            raise InvalidAddressError(f"Empty endpoint in {url!r}")
        if port is not None:
            endpoint = f"{endpoint}:{port}"
    else:
        bucket = host

    if not _BUCKET_RE.fullmatch(bucket):
        raise InvalidAddressError(f"Invalid bucket name: {host}")
    return AddressSpec(
        bucket=bucket,
        key=unquote(parts.path).lstrip("/"),
        region=region,
        endpoint=endpoint,
    )


def parse_user_info(url: str) -> tuple[str | None, str | None, str | None]:
    """
    Extract ``(profile, access_key_id, secret_access_key)`` from a URL's user info.

    ``id:secret@`` gives a key pair, a bare ``name@`` gives a profile.

    Raises
    ------
    InvalidAddressError
        If a key pair has an empty id or an empty secret.
    """
    parts = urlsplit(url)
    if not parts.username and parts.password is None:
        return None, None, None
    username = unquote(parts.username or "")
    if parts.password is None:
        return username, None, None
    secret = unquote(parts.password)
    if not username or not secret:
        raise InvalidAddressError(f"Incomplete credentials in URL for host {parts.hostname!r}")
    return None, username, secret
