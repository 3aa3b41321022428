"""RPC system for local clients.

Provides a Unix domain socket server speaking newline-delimited JSON. Each
request names a method which is dispatched to a handler from a read-only
registry, and the result or error comes back in a response with the same id.

Public API:
- RPCServer: Unix socket listener, one session per connection
- MethodRegistry: read-only method table passed to the server
- build_default_registry: registry of the built-in chain methods
- RPCClient, rpc_call: synchronous client

Protocol:
- Request, Response: message types
- decode_request, encode_response: frame codec
"""

from chainipc.rpc.client import RPCCallError, RPCClient, rpc_call
from chainipc.rpc.methods import build_default_registry, register_chain_methods
from chainipc.rpc.protocol import (
    DecodeError,
    EncodeError,
    FrameTooLarge,
    Request,
    Response,
    decode_request,
    decode_response,
    encode_request,
    encode_response,
)
from chainipc.rpc.registry import (
    InvalidParams,
    MethodError,
    MethodRegistry,
    Outcome,
    RPCHandler,
)
from chainipc.rpc.server import BindError, RPCServer
from chainipc.rpc.session import ConnectionSession, SessionState

__all__ = [
    # Server
    "BindError",
    "ConnectionSession",
    "RPCServer",
    "SessionState",
    # Registry
    "InvalidParams",
    "MethodError",
    "MethodRegistry",
    "Outcome",
    "RPCHandler",
    "build_default_registry",
    "register_chain_methods",
    # Client
    "RPCCallError",
    "RPCClient",
    "rpc_call",
    # Protocol
    "DecodeError",
    "EncodeError",
    "FrameTooLarge",
    "Request",
    "Response",
    "decode_request",
    "decode_response",
    "encode_request",
    "encode_response",
]
