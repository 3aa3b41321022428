"""Main CLI application."""

import typer

from chainipc.cli.commands import call, config, serve

app = typer.Typer(
    name="chainipc",
    help="chainipc - JSON RPC over a local Unix socket",
    no_args_is_help=True,
)

serve.register(app)
call.register(app)
config.register(app)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
