"""Per-connection request loop."""

import asyncio
import logging
from enum import Enum
from typing import Literal

from chainipc.rpc.protocol import (
    DecodeError,
    FrameTooLarge,
    Response,
    decode_request,
    encode_response,
)
from chainipc.rpc.registry import MethodRegistry

logger = logging.getLogger(__name__)

MalformedFramePolicy = Literal["drop", "reply"]


class SessionState(Enum):
    """Where a session is in its read-dispatch-write loop."""

    AWAITING_FRAME = "awaiting_frame"
    DECODING = "decoding"
    DISPATCHING = "dispatching"
    ENCODING = "encoding"
    CLOSED = "closed"
    FAULTED = "faulted"


class ConnectionSession:
    """Serve requests from one client connection until it closes.

    Requests are handled one at a time in arrival order, so responses are
    written in the same order the requests were read. The session owns its
    stream exclusively; the registry is the only shared object and is
    read-only.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        registry: MethodRegistry,
        *,
        malformed_frames: MalformedFramePolicy = "drop",
        idle_timeout: float | None = None,
    ):
        self._reader = reader
        self._writer = writer
        self._registry = registry
        self._malformed_frames = malformed_frames
        self._idle_timeout = idle_timeout
        self.state = SessionState.AWAITING_FRAME
        self.requests_served = 0

    async def run(self) -> None:
        """Run the loop until EOF.

        Raises:
            OSError: On read/write failures; the session is FAULTED.
            FrameTooLarge: If a client sends an oversized frame.
            EncodeError: If a handler produced a non-JSON result.
        """
        try:
            while True:
                self.state = SessionState.AWAITING_FRAME
                line = await self._read_frame()
                if line is None:
                    self.state = SessionState.CLOSED
                    return

                if not line.strip():
                    continue

                await self._handle_frame(line)
        except BaseException:
            self.state = SessionState.FAULTED
            raise
        finally:
            self._writer.close()

    async def _read_frame(self) -> bytes | None:
        """Read one line, or None on EOF or idle timeout."""
        try:
            if self._idle_timeout is None:
                line = await self._reader.readline()
            else:
                line = await asyncio.wait_for(
                    self._reader.readline(), timeout=self._idle_timeout
                )
        except TimeoutError:
            logger.info(
                "Closing idle RPC connection",
                extra={"idle_timeout": self._idle_timeout},
            )
            return None
        except ValueError as e:
            # StreamReader raises ValueError when a line exceeds its limit
            raise FrameTooLarge(str(e)) from e

        if not line:
            return None
        return line

    async def _handle_frame(self, line: bytes) -> None:
        self.state = SessionState.DECODING
        try:
            request = decode_request(line)
        except DecodeError as e:
            logger.warning("Error parsing request: %s", e.message)
            if self._malformed_frames == "reply":
                await self._write(
                    Response.failure(e.request_id, f"Parse error: {e.message}")
                )
            return

        logger.debug(
            "Received request",
            extra={"id": request.id, "method": request.method},
        )

        self.state = SessionState.DISPATCHING
        outcome = await self._registry.dispatch(request)

        await self._write(Response(request.id, outcome.result, outcome.error))
        self.requests_served += 1

    async def _write(self, response: Response) -> None:
        self.state = SessionState.ENCODING
        frame = encode_response(response)
        self._writer.write(frame)
        await self._writer.drain()
