"""RPC method handlers."""

from typing import TYPE_CHECKING

from chainipc.rpc.methods.chain import register_chain_methods
from chainipc.rpc.registry import MethodRegistry, RPCHandler

if TYPE_CHECKING:
    from chainipc.config.models import ChainIPCConfig


def build_default_registry(config: "ChainIPCConfig") -> MethodRegistry:
    """Assemble the registry of built-in methods."""
    methods: dict[str, RPCHandler] = {}
    register_chain_methods(methods, config.chain)
    return MethodRegistry(methods)


__all__ = [
    "build_default_registry",
    "register_chain_methods",
]
