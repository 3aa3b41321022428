"""Configuration models using Pydantic."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from chainipc.config.paths import DEFAULT_SOCKET_PATH


class ServerConfig(BaseModel):
    """Configuration for the RPC socket server.

    The socket is trusted and same-host only; permissions are the only
    access control.
    """

    socket_path: Path = DEFAULT_SOCKET_PATH
    socket_mode: int = Field(default=0o600, ge=0, le=0o777)

    # Longest accepted frame in bytes; longer lines close the connection
    max_frame_bytes: int = Field(default=1024 * 1024, ge=1024)
    # Seconds without a frame before a connection is closed (None = never)
    idle_timeout: float | None = Field(default=None, gt=0)

    # "drop" ignores undecodable frames, "reply" answers with a parse error
    malformed_frames: Literal["drop", "reply"] = "drop"


class ChainConfig(BaseModel):
    """Placeholder chain state served by the built-in methods."""

    block_count: int = Field(default=84372, ge=0)


class ConfigError(Exception):
    """Configuration error."""

    pass


class ChainIPCConfig(BaseModel):
    """Root configuration model."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    chain: ChainConfig = Field(default_factory=ChainConfig)
