"""Shared test fixtures and factories."""

import logging
import shutil
import tempfile
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from chainipc.config.models import ChainIPCConfig
from chainipc.config.paths import get_chainipc_home
from chainipc.rpc import MethodRegistry, RPCServer, build_default_registry

# =============================================================================
# Environment
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch) -> Iterator[None]:
    """Keep tests away from the real home directory and socket."""
    monkeypatch.setenv("CHAINIPC_HOME", str(tmp_path / "home"))
    monkeypatch.delenv("CHAINIPC_SOCKET", raising=False)
    monkeypatch.delenv("CHAINIPC_LOG_LEVEL", raising=False)
    monkeypatch.chdir(tmp_path)
    get_chainipc_home.cache_clear()
    yield
    get_chainipc_home.cache_clear()


# =============================================================================
# Socket Fixtures
# =============================================================================


@pytest.fixture
def socket_dir() -> Iterator[Path]:
    """Short-lived directory with a short path (AF_UNIX paths are limited)."""
    path = Path(tempfile.mkdtemp(prefix="cipc-", dir="/tmp"))
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def socket_path(socket_dir: Path) -> Path:
    return socket_dir / "rpc.sock"


@pytest.fixture
def default_config() -> ChainIPCConfig:
    return ChainIPCConfig()


@pytest.fixture
def default_registry(default_config: ChainIPCConfig) -> MethodRegistry:
    return build_default_registry(default_config)


@pytest.fixture
def make_server(
    socket_path: Path, default_registry: MethodRegistry
) -> Callable[..., RPCServer]:
    """Factory for servers bound to the test socket.

    Usage:
        async with make_server() as server:
            ...
    """

    def _make(registry: MethodRegistry | None = None, **kwargs: Any) -> RPCServer:
        return RPCServer(socket_path, registry or default_registry, **kwargs)

    return _make


# =============================================================================
# CLI Test Helpers
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner with colors disabled."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1"})


@pytest.fixture
def config_toml_content() -> str:
    """Valid TOML config content."""
    return """
[server]
socket_path = "/tmp/chainipc-test.sock"
idle_timeout = 30
malformed_frames = "reply"

[chain]
block_count = 100
"""


@pytest.fixture
def config_file(tmp_path: Path, config_toml_content: str) -> Path:
    """Create a temporary config file."""
    config_path = tmp_path / "config.toml"
    config_path.write_text(config_toml_content)
    return config_path


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    """Undo configure_logging() changes to the root logger."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)
