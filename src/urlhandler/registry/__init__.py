from urlhandler.registry._fsspec import PluggableFileSystem, register_fsspec
from urlhandler.registry._install import (
    DirectInstall,
    ForcedInstall,
    HostOpenerInstall,
    InstallStrategy,
    default_strategies,
    install,
    install_or_raise,
)
from urlhandler.registry._scheme_registry import PluggableRegistry
from urlhandler.registry._urllib import (
    OpenerConnection,
    OpenerFallback,
    OpenerStreamHandler,
    RegistryHandler,
    build_registry_opener,
)

__all__ = [
    "DirectInstall",
    "ForcedInstall",
    "HostOpenerInstall",
    "InstallStrategy",
    "OpenerConnection",
    "OpenerFallback",
    "OpenerStreamHandler",
    "PluggableFileSystem",
    "PluggableRegistry",
    "RegistryHandler",
    "build_registry_opener",
    "default_strategies",
    "install",
    "install_or_raise",
    "register_fsspec",
]
