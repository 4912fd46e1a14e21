# /// script
# dependencies = [
#     "urlhandler",
#     "boto3",
#     "fsspec",
# ]
# ///
"""
S3 URL Demo

This script demonstrates reading ``s3://`` URLs through the standard library's
``urllib.request.urlopen`` and through ``fsspec.open`` once a registry is installed.

Examples of S3 URLs:
    - "s3://bucket/key" - Default region and credentials
    - "s3://bucket.eu-west-1/key" - Explicit region
    - "s3://bucket.minio.local:9000/key" - S3-compatible endpoint
    - "s3://profile@bucket/key" - Named credentials profile
    - "s3://KEYID:SECRET@bucket/key" - Static credentials

Objects are served from an in-memory store unless a URL is given on the command
line, in which case it is read from S3 with boto3.
"""

import sys
import urllib.request
from datetime import datetime, timezone

import fsspec

from urlhandler import PluggableRegistry, install
from urlhandler.errors import URLHandlerError
from urlhandler.registry import register_fsspec
from urlhandler.s3 import S3ProtocolHandlerFactory, parse_address
from urlhandler.testing.memory import MemoryObjectStore


def demo_address_parsing() -> None:
    """Show how S3 URLs are split into bucket, key and region or endpoint."""
    print("=== Address parsing ===")
    for url in [
        "s3://bucket/data/file.txt",
        "s3://bucket.eu-west-1/data/file.txt",
        "s3://bucket.minio.local:9000/data/file.txt",
    ]:
        print(f"{url}\n   {parse_address(url)}")


def demo_urlopen(url: str) -> None:
    """Read an object and its headers with urlopen."""
    print("\n=== urllib.request.urlopen ===")
    with urllib.request.urlopen(url) as response:
        print(f"Content-Type: {response.headers['Content-Type']}")
        print(f"Last-Modified: {response.headers['Last-Modified']}")
        print(f"Expires: {response.headers['Expires']}")
        print(f"Body: {response.read()[:80]!r}")


def demo_fsspec(registry: PluggableRegistry, url: str) -> None:
    """Read the same object through fsspec."""
    print("\n=== fsspec.open ===")
    register_fsspec(registry)
    with fsspec.open(url, "rb") as f:
        print(f"Body: {f.read()[:80]!r}")


def demo_error_cases() -> None:
    """Show how bad URLs and missing objects are reported."""
    print("\n=== Error cases ===")
    for url in ["s3:///no-bucket", "s3://bucket./key", "s3://demo-bucket/missing"]:
        try:
            urllib.request.urlopen(url)
            print(f"Should have failed: {url}")
        except URLHandlerError as e:
            print(f"Rejected {url} -> {type(e).__name__}: {e}")


def main(argv: list[str]) -> None:
    if len(argv) > 1:
        factory = S3ProtocolHandlerFactory()
        url = argv[1]
    else:
        store = MemoryObjectStore()
        store.put(
            "demo-bucket",
            "greeting.txt",
            b"hello from an in-memory bucket",
            content_type="text/plain",
            last_modified=datetime.now(timezone.utc),
        )
        factory = S3ProtocolHandlerFactory(store)
        url = "s3://demo-bucket/greeting.txt"

    registry = PluggableRegistry.with_factories([factory])
    if not install(registry):
        sys.exit("Could not install the URL handler registry")

    demo_address_parsing()
    demo_urlopen(url)
    demo_fsspec(registry, url)
    if len(argv) == 1:
        demo_error_cases()


if __name__ == "__main__":
    print("S3 URL Demo")
    print("=" * 30)
    main(sys.argv)
