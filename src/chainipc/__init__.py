"""chainipc - newline-delimited JSON RPC over a local Unix socket."""

__version__ = "0.1.0"
