"""Unix domain socket RPC server."""

import asyncio
import logging
from contextlib import suppress
from pathlib import Path
from typing import TYPE_CHECKING

from chainipc.rpc.protocol import FrameTooLarge
from chainipc.rpc.registry import MethodRegistry
from chainipc.rpc.session import ConnectionSession, MalformedFramePolicy

if TYPE_CHECKING:
    from chainipc.config.models import ServerConfig

logger = logging.getLogger(__name__)

DEFAULT_MAX_FRAME_BYTES = 1024 * 1024
IN_USE_PROBE_TIMEOUT_SECONDS = 1.0


class BindError(Exception):
    """The listening socket could not be set up."""


class RPCServer:
    """Accepts connections on a Unix socket and serves each independently.

    Every accepted connection gets its own task running a ConnectionSession,
    so a slow or misbehaving client never blocks the others.
    """

    def __init__(
        self,
        socket_path: Path,
        registry: MethodRegistry,
        *,
        socket_mode: int = 0o600,
        max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES,
        idle_timeout: float | None = None,
        malformed_frames: MalformedFramePolicy = "drop",
    ):
        """Initialize RPC server.

        Args:
            socket_path: Path to the Unix domain socket.
            registry: Methods available to clients.
            socket_mode: Permission bits applied to the socket file.
            max_frame_bytes: Longest accepted line, including the newline.
            idle_timeout: Seconds a connection may sit without sending a
                frame before it is closed. None disables the timeout.
            malformed_frames: "drop" ignores undecodable frames, "reply"
                answers them with a parse error response.
        """
        self._socket_path = Path(socket_path)
        self._registry = registry
        self._socket_mode = socket_mode
        self._max_frame_bytes = max_frame_bytes
        self._idle_timeout = idle_timeout
        self._malformed_frames = malformed_frames
        self._server: asyncio.Server | None = None
        self._connections: set[asyncio.Task] = set()
        self._stopped = asyncio.Event()
        self._stopping = False
        self._running = False

    @classmethod
    def from_config(
        cls, config: "ServerConfig", registry: MethodRegistry
    ) -> "RPCServer":
        return cls(
            config.socket_path,
            registry,
            socket_mode=config.socket_mode,
            max_frame_bytes=config.max_frame_bytes,
            idle_timeout=config.idle_timeout,
            malformed_frames=config.malformed_frames,
        )

    async def start(self) -> None:
        """Bind the socket and start accepting connections.

        Raises:
            BindError: If the socket is in use or cannot be created.
        """
        try:
            self._socket_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BindError(f"Cannot create {self._socket_path.parent}: {e}") from e

        await self._remove_stale_socket()

        try:
            self._server = await asyncio.start_unix_server(
                self._handle_connection,
                path=str(self._socket_path),
                limit=self._max_frame_bytes,
            )
            self._socket_path.chmod(self._socket_mode)
        except OSError as e:
            raise BindError(f"Cannot bind {self._socket_path}: {e}") from e

        self._stopped.clear()
        self._running = True
        logger.info("RPC server started", extra={"socket": str(self._socket_path)})

    async def _remove_stale_socket(self) -> None:
        path = self._socket_path
        if path.is_socket() and await _accepts_connections(path):
            raise BindError(f"Socket already in use: {path}")

        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise BindError(f"Cannot remove existing {path}: {e}") from e

    async def serve_forever(self) -> None:
        """Serve until stop() is called."""
        if not self._running:
            await self.start()
        await self._stopped.wait()

    async def stop(self) -> None:
        """Stop accepting, close active connections and remove the socket."""
        self._running = False

        server, self._server = self._server, None
        if server is None:
            # Another stop() owns shutdown; wait for it to finish
            if self._stopping:
                await self._stopped.wait()
            else:
                self._stopped.set()
            return

        self._stopping = True
        try:
            server.close()

            for task in list(self._connections):
                task.cancel()
            if self._connections:
                await asyncio.gather(*self._connections, return_exceptions=True)

            await server.wait_closed()

            self._socket_path.unlink(missing_ok=True)
            logger.info("RPC server stopped")
        finally:
            self._stopping = False
            self._stopped.set()

    async def __aenter__(self) -> "RPCServer":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    async def _handle_connection(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        """Handle a client connection."""
        task = asyncio.current_task()
        if task is not None:
            self._connections.add(task)

        session = ConnectionSession(
            reader,
            writer,
            self._registry,
            malformed_frames=self._malformed_frames,
            idle_timeout=self._idle_timeout,
        )
        try:
            await session.run()
        except FrameTooLarge:
            logger.warning(
                "Closing RPC connection: frame too large",
                extra={"max_frame_bytes": self._max_frame_bytes},
            )
        except OSError as e:
            logger.warning("Connection error: %s", e)
        except Exception:
            logger.exception("Error handling RPC connection")
        finally:
            with suppress(OSError):
                await writer.wait_closed()
            if task is not None:
                self._connections.discard(task)
            logger.debug(
                "RPC connection closed",
                extra={"requests": session.requests_served},
            )

    @property
    def socket_path(self) -> Path:
        """Get the socket path."""
        return self._socket_path

    @property
    def registry(self) -> MethodRegistry:
        return self._registry

    @property
    def is_running(self) -> bool:
        """Check if server is running."""
        return self._running

    @property
    def active_connections(self) -> int:
        return len(self._connections)


async def _accepts_connections(path: Path) -> bool:
    """Check whether something is listening on a socket path."""
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_unix_connection(str(path)),
            timeout=IN_USE_PROBE_TIMEOUT_SECONDS,
        )
    except (OSError, TimeoutError):
        return False

    writer.close()
    with suppress(OSError):
        await writer.wait_closed()
    return True
