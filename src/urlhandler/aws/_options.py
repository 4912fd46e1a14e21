from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import quote


@dataclass(frozen=True)
class ConnectionOptions:
    """
    Options for creating a remote object store client.

    Options are compared field by field and used as a cache key by client factories,
    so two URLs differing only in, say, surrounding whitespace produce two clients.
    Values are therefore stored exactly as parsed.

    ``region`` and ``endpoint`` are alternatives; when both are set the region wins.
    """

    profile: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = field(default=None, repr=False)
    region: str | None = None
    endpoint: str | None = None
    proxy_host: str | None = None
    proxy_port: int | None = None
    proxy_username: str | None = None
    proxy_password: str | None = field(default=None, repr=False)

    @property
    def has_static_credentials(self) -> bool:
        return self.access_key_id is not None and self.secret_access_key is not None

    @property
    def endpoint_url(self) -> str | None:
        """The endpoint as a URL, or None when a region applies."""
        if self.region or not self.endpoint:
            return None
        if "://" in self.endpoint:
            return self.endpoint
        return f"https://{self.endpoint}"

    @property
    def proxy_url(self) -> str | None:
        if not self.proxy_host:
            return None
        auth = ""
        if self.proxy_username:
            auth = quote(self.proxy_username, safe="")
            if self.proxy_password:
                auth += ":" + quote(self.proxy_password, safe="")
            auth += "@"
        port = f":{self.proxy_port}" if self.proxy_port else ""
        return f"http://{auth}{self.proxy_host}{port}"
