"""Synchronous RPC client for talking to a local chainipc server."""

import itertools
import socket
from pathlib import Path
from typing import Any

from chainipc.config.paths import get_socket_path
from chainipc.rpc.protocol import (
    FRAME_DELIMITER,
    Request,
    decode_response,
    encode_request,
)

DEFAULT_TIMEOUT_SECONDS = 5.0


class RPCCallError(Exception):
    """The server answered with an error."""

    def __init__(self, message: str, request_id: int | None = None):
        super().__init__(message)
        self.message = message
        self.request_id = request_id


def resolve_socket_path(socket_path: Path | str | None = None) -> Path:
    """Pick the socket path: explicit argument, then environment, then default."""
    if socket_path is not None:
        return Path(socket_path)
    return get_socket_path()


class RPCClient:
    """A single connection used for sequential calls.

    Usage:
        with RPCClient(path) as client:
            count = client.call("getblockcount")
    """

    def __init__(
        self,
        socket_path: Path | str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self._socket_path = resolve_socket_path(socket_path)
        self._timeout = timeout
        self._sock: socket.socket | None = None
        self._buffer = b""
        self._ids = itertools.count(1)

    def connect(self) -> None:
        if self._sock is not None:
            return
        if not self._socket_path.exists():
            raise ConnectionError(f"RPC socket not found: {self._socket_path}")

        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        sock.settimeout(self._timeout)
        try:
            sock.connect(str(self._socket_path))
        except OSError:
            sock.close()
            raise
        self._sock = sock

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None
        self._buffer = b""

    def __enter__(self) -> "RPCClient":
        self.connect()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def call(self, method: str, params: list[Any] | None = None) -> Any:
        """Make an RPC call and return its result.

        Raises:
            RPCCallError: If the server returned an error.
            ConnectionError: If the connection is unavailable or closed.
        """
        self.connect()
        assert self._sock is not None

        request = Request(id=next(self._ids), method=method, params=params or [])
        self._sock.sendall(encode_request(request))

        response = decode_response(self._read_line())
        if response.id is not None and response.id != request.id:
            raise RPCCallError(
                f"Response id {response.id} does not match request {request.id}",
                request_id=request.id,
            )
        if response.error is not None:
            raise RPCCallError(response.error, request_id=response.id)
        return response.result

    def _read_line(self) -> bytes:
        assert self._sock is not None
        while FRAME_DELIMITER not in self._buffer:
            chunk = self._sock.recv(65536)
            if not chunk:
                raise ConnectionError("Connection closed by server")
            self._buffer += chunk

        line, _, self._buffer = self._buffer.partition(FRAME_DELIMITER)
        return line


def rpc_call(
    method: str,
    params: list[Any] | None = None,
    socket_path: Path | str | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> Any:
    """Make a one-off RPC call.

    Args:
        method: RPC method name (e.g., "getblockhash").
        params: Positional method parameters.
        socket_path: Server socket. Defaults to $CHAINIPC_SOCKET, then
            /tmp/ipc_socket.
        timeout: Socket timeout in seconds.

    Returns:
        The result from the RPC call.
    """
    with RPCClient(socket_path, timeout=timeout) as client:
        return client.call(method, params)
