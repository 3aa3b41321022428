"""Centralized path management for chainipc.

Config and logs live under a single base directory, overridable with the
CHAINIPC_HOME environment variable. The RPC socket defaults to a fixed
well-known path so clients can find it without configuration.
"""

import os
from functools import lru_cache
from pathlib import Path

ENV_VAR = "CHAINIPC_HOME"
SOCKET_ENV_VAR = "CHAINIPC_SOCKET"

DEFAULT_SOCKET_PATH = Path("/tmp/ipc_socket")


@lru_cache(maxsize=1)
def get_chainipc_home() -> Path:
    """Get the base directory for chainipc data.

    Resolution order:
    1. CHAINIPC_HOME environment variable (if set)
    2. ~/.chainipc
    """
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser().resolve()
    return Path.home() / ".chainipc"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_chainipc_home() / "config.toml"


def get_logs_path() -> Path:
    """Get the default logs directory path."""
    return get_chainipc_home() / "logs"


def get_socket_path() -> Path:
    """Get the RPC socket path, honoring CHAINIPC_SOCKET."""
    if env_path := os.environ.get(SOCKET_ENV_VAR):
        return Path(env_path).expanduser()
    return DEFAULT_SOCKET_PATH
