"""CLI command modules."""

from chainipc.cli.commands import call, config, serve

__all__ = [
    "call",
    "config",
    "serve",
]
