"""Server command for running the RPC endpoint."""

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer

from chainipc.cli.console import error

logger = logging.getLogger(__name__)


def register(app: typer.Typer) -> None:
    """Register the serve command."""

    @app.command()
    def serve(
        config: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="Path to configuration file",
            ),
        ] = None,
        socket: Annotated[
            Path | None,
            typer.Option(
                "--socket",
                "-s",
                help="Socket path (overrides config and $CHAINIPC_SOCKET)",
            ),
        ] = None,
        log_level: Annotated[
            str | None,
            typer.Option(
                "--log-level",
                "-l",
                help="DEBUG, INFO, WARNING or ERROR (default: $CHAINIPC_LOG_LEVEL or INFO)",
            ),
        ] = None,
        log_to_file: Annotated[
            bool,
            typer.Option(
                "--log-to-file",
                help="Also write JSONL logs under $CHAINIPC_HOME/logs",
            ),
        ] = False,
    ) -> None:
        """Start the RPC server and run until interrupted."""
        try:
            asyncio.run(_run_server(config, socket, log_level, log_to_file))
        except KeyboardInterrupt:
            # Use print here since logging may not be configured yet
            print("\nServer stopped")


async def _run_server(
    config_path: Path | None = None,
    socket_path: Path | None = None,
    log_level: str | None = None,
    log_to_file: bool = False,
) -> None:
    """Run the server asynchronously."""
    import signal as signal_module

    from pydantic import ValidationError

    from chainipc.config import ConfigError, load_config
    from chainipc.logging import configure_logging
    from chainipc.rpc import BindError, RPCServer, build_default_registry

    configure_logging(level=log_level, use_rich=True, log_to_file=log_to_file)

    try:
        chainipc_config = load_config(config_path)
    except (FileNotFoundError, ConfigError, ValidationError) as e:
        error(f"Error loading config: {e}")
        raise typer.Exit(1) from None

    server_config = chainipc_config.server
    if socket_path is not None:
        server_config = server_config.model_copy(update={"socket_path": socket_path})

    registry = build_default_registry(chainipc_config)
    server = RPCServer.from_config(server_config, registry)

    try:
        await server.start()
    except BindError as e:
        logger.error("Failed to start RPC server: %s", e)
        error(str(e))
        raise typer.Exit(1) from None

    logger.info(
        "RPC server listening on %s",
        server.socket_path,
        extra={"methods": registry.names},
    )

    loop = asyncio.get_running_loop()
    stop_task: asyncio.Task | None = None

    def handle_signal() -> None:
        nonlocal stop_task
        if stop_task is not None:
            logger.info("Shutdown already in progress")
            return
        logger.info("Shutting down RPC server")
        stop_task = loop.create_task(server.stop())

    for sig in (signal_module.SIGTERM, signal_module.SIGINT):
        loop.add_signal_handler(sig, handle_signal)

    try:
        await server.serve_forever()
    finally:
        for sig in (signal_module.SIGTERM, signal_module.SIGINT):
            loop.remove_signal_handler(sig)
        if stop_task is not None:
            await stop_task
        elif server.is_running:
            await server.stop()
