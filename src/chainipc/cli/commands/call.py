"""Call command for sending a single request to a running server."""

import json
from pathlib import Path
from typing import Annotated, Any

import typer

from chainipc.cli.console import console, error


def parse_param(raw: str) -> Any:
    """Parse a command-line param as JSON, falling back to a plain string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def register(app: typer.Typer) -> None:
    """Register the call command."""

    @app.command()
    def call(
        method: Annotated[str, typer.Argument(help="Method name, e.g. getblockhash")],
        params: Annotated[
            list[str] | None,
            typer.Argument(help="Positional params, each parsed as JSON"),
        ] = None,
        socket: Annotated[
            Path | None,
            typer.Option(
                "--socket",
                "-s",
                help="Socket path (default: $CHAINIPC_SOCKET or /tmp/ipc_socket)",
            ),
        ] = None,
        timeout: Annotated[
            float,
            typer.Option("--timeout", "-t", help="Seconds to wait for a reply"),
        ] = 5.0,
    ) -> None:
        """Call a method on a running server and print the result."""
        from chainipc.rpc import RPCCallError, rpc_call

        parsed = [parse_param(p) for p in params or []]

        try:
            result = rpc_call(method, parsed, socket_path=socket, timeout=timeout)
        except RPCCallError as e:
            error(f"Error: {e.message}")
            raise typer.Exit(1) from None
        except OSError as e:
            error(f"Connection failed: {e}")
            raise typer.Exit(1) from None

        console.print_json(json.dumps(result))
