"""Configuration module."""

from chainipc.config.loader import load_config
from chainipc.config.models import (
    ChainConfig,
    ChainIPCConfig,
    ConfigError,
    ServerConfig,
)
from chainipc.config.paths import (
    DEFAULT_SOCKET_PATH,
    get_chainipc_home,
    get_config_path,
    get_logs_path,
    get_socket_path,
)

__all__ = [
    "DEFAULT_SOCKET_PATH",
    "ChainConfig",
    "ChainIPCConfig",
    "ConfigError",
    "ServerConfig",
    "get_chainipc_home",
    "get_config_path",
    "get_logs_path",
    "get_socket_path",
    "load_config",
]
