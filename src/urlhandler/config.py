from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from urlhandler.errors import ConfigurationError

INSTALL_STRATEGY_NAMES = ("host", "direct", "forced")


@dataclass(frozen=True)
class HandlerSettings:
    """
    Process-level settings shared by handlers and the installer.

    Proxy settings are copied into every ``ConnectionOptions`` built from a URL, so
    they take part in client caching. ``install_strategies`` names the installation
    attempts to run, in order; leave out ``"forced"`` where patching urllib's
    internal opener is not acceptable.
    """

    proxy_host: str | None = None
    proxy_port: int | None = None
    proxy_username: str | None = None
    proxy_password: str | None = field(default=None, repr=False)
    install_strategies: tuple[str, ...] = INSTALL_STRATEGY_NAMES


def _env(environ: Mapping[str, str], name: str) -> str | None:
    value = (environ.get(name) or "").strip()
    return value or None


def _parse_port(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        port = int(value)
    except ValueError:
        raise ConfigurationError(f"Invalid proxy port: {value!r}") from None
    if not 0 < port < 65536:
        raise ConfigurationError(f"Proxy port out of range: {port}")
    return port


def _parse_strategies(value: str | None) -> tuple[str, ...]:
    if value is None:
        return INSTALL_STRATEGY_NAMES
    names = tuple(part.strip().lower() for part in value.split(",") if part.strip())
    unknown = [name for name in names if name not in INSTALL_STRATEGY_NAMES]
    if unknown:
        raise ConfigurationError(
            f"Unknown install strategies {unknown}; expected any of {list(INSTALL_STRATEGY_NAMES)}"
        )
    return names


def load_settings(environ: Mapping[str, str] | None = None) -> HandlerSettings:
    """Read settings from ``URLHANDLER_*`` environment variables."""
    if environ is None:
        environ = os.environ
    return HandlerSettings(
        proxy_host=_env(environ, "URLHANDLER_PROXY_HOST"),
        proxy_port=_parse_port(_env(environ, "URLHANDLER_PROXY_PORT")),
        proxy_username=_env(environ, "URLHANDLER_PROXY_USERNAME"),
        proxy_password=_env(environ, "URLHANDLER_PROXY_PASSWORD"),
        install_strategies=_parse_strategies(_env(environ, "URLHANDLER_INSTALL_STRATEGIES")),
    )
