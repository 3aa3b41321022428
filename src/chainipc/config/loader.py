"""Configuration loading from TOML files and environment variables."""

import os
import tomllib
from pathlib import Path
from typing import Any

from chainipc.config.models import ChainIPCConfig, ConfigError
from chainipc.config.paths import SOCKET_ENV_VAR, get_config_path


def _get_default_config_paths() -> list[Path]:
    """Get ordered list of default config file locations."""
    return [
        Path("chainipc.toml"),  # Current directory
        get_config_path(),  # ~/.chainipc/config.toml (or CHAINIPC_HOME)
        Path("/etc/chainipc/config.toml"),  # System-wide
    ]


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply environment overrides on top of file values."""
    if socket_path := os.environ.get(SOCKET_ENV_VAR):
        server = config.setdefault("server", {})
        server["socket_path"] = socket_path
    return config


def load_config(path: Path | None = None) -> ChainIPCConfig:
    """Load configuration from TOML file.

    Args:
        path: Explicit path to config file. If None, searches default
            locations and falls back to built-in defaults.

    Returns:
        Validated ChainIPCConfig instance.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
        ConfigError: If the file is not valid TOML.
        pydantic.ValidationError: If config values are invalid.
    """
    config_path: Path | None = None

    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        for default_path in _get_default_config_paths():
            expanded = default_path.expanduser()
            if expanded.exists():
                config_path = expanded
                break

    raw_config: dict[str, Any] = {}
    if config_path is not None:
        try:
            with config_path.open("rb") as f:
                raw_config = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    raw_config = _apply_env_overrides(raw_config)

    return ChainIPCConfig.model_validate(raw_config)
