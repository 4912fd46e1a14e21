"""
Installation of a PluggableRegistry as the process-wide URL dispatcher.

The process-wide dispatcher is the global opener used by ``urllib.request.urlopen``.
Installation is attempted by an ordered sequence of strategies:

1. host   - join an ``OpenerDirector`` that is already installed, as one more
            cooperating handler
2. direct - install a new opener through ``urllib.request.install_opener``, but only
            while no opener is installed
3. forced - overwrite urllib's internal opener slot and keep the previous opener
            as the registry's first fallback

The first strategy to succeed wins. A failed attempt leaves the installed opener and
the registry's fallbacks as they were.
"""

from __future__ import annotations

import logging
import urllib.request
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from urlhandler.config import HandlerSettings, load_settings
from urlhandler.errors import InstallationError
from urlhandler.registry._urllib import (
    OpenerFallback,
    RegistryHandler,
    attached_registries,
    build_registry_opener,
)

if TYPE_CHECKING:
    from urlhandler.registry._scheme_registry import PluggableRegistry

logger = logging.getLogger(__name__)

# Name of urllib.request's module-level opener; not part of its public API.
_OPENER_SLOT = "_opener"


class AlreadyInstalledError(Exception):
    """Raised by the one-shot install when an opener is already installed."""


def _installed_opener() -> Any:
    return getattr(urllib.request, _OPENER_SLOT, None)


def install_once(opener: urllib.request.OpenerDirector) -> None:
    """
    Install ``opener`` globally unless another opener is already installed.

    ``urllib.request.install_opener`` silently replaces an installed opener, which
    would drop every scheme it served; this wrapper refuses instead.

    Raises
    ------
    AlreadyInstalledError
        If an opener is already installed.
    """
    if _installed_opener() is not None:
        raise AlreadyInstalledError("opener already installed")
    urllib.request.install_opener(opener)


class InstallStrategy(ABC):
    name: str

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    @abstractmethod
    def attempt(self, registry: PluggableRegistry) -> bool:
        """Try to install ``registry``; return True on success."""


class HostOpenerInstall(InstallStrategy):
    """
    Attach the registry to an ``OpenerDirector`` installed by the host application.

    An opener director already supports many cooperating handlers, so the registry
    joins it instead of replacing it. No installed opener is the normal case and is
    not an error.
    """

    name = "host"

    def attempt(self, registry: PluggableRegistry) -> bool:
        opener = _installed_opener()
        if not isinstance(opener, urllib.request.OpenerDirector):
            return False
        if any(attached is registry for attached in attached_registries(opener)):
            return True
        try:
            opener.add_handler(RegistryHandler(registry))
        except Exception:
            logger.warning("Installed opener %r rejected %r", opener, registry, exc_info=True)
            return False
        return True


class DirectInstall(InstallStrategy):
    """Install a new opener through urllib's public entry point."""

    name = "direct"

    def attempt(self, registry: PluggableRegistry) -> bool:
        try:
            install_once(build_registry_opener(registry))
        except AlreadyInstalledError:
            return False
        return True


class ForcedInstall(InstallStrategy):
    """
    Replace the installed opener by writing urllib's internal slot.

    This is the last resort. The previous opener, if any, becomes the registry's
    first fallback so that schemes it served keep resolving. An opener already serving
    the registry is left in place. If the slot can't be found or written the attempt
    fails and nothing is changed.
    """

    name = "forced"

    def attempt(self, registry: PluggableRegistry) -> bool:
        if not hasattr(urllib.request, _OPENER_SLOT):
            return False
        previous = getattr(urllib.request, _OPENER_SLOT)
        if any(attached is registry for attached in attached_registries(previous)):
            return True
        fallback = OpenerFallback(previous) if previous is not None else None
        if fallback is not None:
            registry.add_fallback(fallback, first=True)
        try:
            setattr(urllib.request, _OPENER_SLOT, build_registry_opener(registry))
        except Exception:
            if fallback is not None:
                registry.remove_fallback(fallback)
            logger.debug("Could not replace the installed opener", exc_info=True)
            return False
        return True


STRATEGIES: dict[str, type[InstallStrategy]] = {
    cls.name: cls for cls in (HostOpenerInstall, DirectInstall, ForcedInstall)
}


def default_strategies(settings: HandlerSettings | None = None) -> list[InstallStrategy]:
    """Strategies named by ``settings.install_strategies``, in order."""
    if settings is None:
        settings = load_settings()
    return [STRATEGIES[name]() for name in settings.install_strategies]


def install(
    registry: PluggableRegistry,
    strategies: Sequence[InstallStrategy] | None = None,
    settings: HandlerSettings | None = None,
) -> bool:
    """
    Try to make ``registry`` the process-wide URL dispatcher.

    Parameters
    ----------
    registry : PluggableRegistry
        The registry to install.
    strategies : Sequence[InstallStrategy], optional
        Strategies to attempt, in order. Defaults to those named in ``settings``.
    settings : HandlerSettings, optional
        Used only when ``strategies`` is not given. Loaded from the environment by
        default.

    Returns
    -------
    bool
        True if a strategy succeeded.
    """
    if strategies is None:
        strategies = default_strategies(settings)
    for strategy in strategies:
        if strategy.attempt(registry):
            logger.info("Installed %r using the %s strategy", registry, strategy.name)
            return True
        logger.debug("Install strategy %s did not apply", strategy.name)
    return False


def install_or_raise(
    registry: PluggableRegistry,
    strategies: Sequence[InstallStrategy] | None = None,
    settings: HandlerSettings | None = None,
) -> None:
    """Like :func:`install`, but raise :class:`InstallationError` on failure."""
    if not install(registry, strategies=strategies, settings=settings):
        raise InstallationError(f"No installation strategy could install {registry!r}")
