"""Read-only method registry and request dispatch."""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from chainipc.rpc.protocol import INTERNAL_ERROR, UNKNOWN_METHOD, Request

logger = logging.getLogger(__name__)

# Handlers take positional params and return a result. Coroutine functions
# run on the event loop, plain functions run in a worker thread.
RPCHandler = Callable[[list[Any]], Any | Awaitable[Any]]


class MethodError(Exception):
    """Handler-level failure reported back to the caller."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidParams(MethodError):
    """Expected parameter missing or of the wrong type."""


@dataclass(frozen=True)
class Outcome:
    """Result of dispatching one request: either a result or an error."""

    result: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, result: Any) -> "Outcome":
        return cls(result=result)

    @classmethod
    def failure(cls, message: str) -> "Outcome":
        return cls(error=message)


class MethodRegistry:
    """Immutable mapping of method names to handlers.

    Built once at startup and shared by every connection. The mapping is
    copied on construction so later changes to the source dict are not seen.
    """

    def __init__(self, methods: Mapping[str, RPCHandler] | None = None):
        self._methods: Mapping[str, RPCHandler] = MappingProxyType(
            dict(methods or {})
        )

    def lookup(self, name: str) -> RPCHandler | None:
        return self._methods.get(name)

    @property
    def names(self) -> list[str]:
        return sorted(self._methods)

    def __contains__(self, name: object) -> bool:
        return name in self._methods

    def __len__(self) -> int:
        return len(self._methods)

    def __iter__(self) -> Iterator[str]:
        return iter(self._methods)

    async def dispatch(self, request: Request) -> Outcome:
        """Resolve and invoke the handler for a request.

        Never raises: unknown methods, handler errors and unexpected handler
        faults all come back as a failed Outcome.
        """
        handler = self.lookup(request.method)
        if handler is None:
            logger.debug("Unknown method", extra={"method": request.method})
            return Outcome.failure(UNKNOWN_METHOD)

        try:
            if inspect.iscoroutinefunction(handler):
                result = await handler(request.params)
            else:
                result = await asyncio.to_thread(handler, request.params)
                if inspect.isawaitable(result):
                    result = await result
        except MethodError as e:
            return Outcome.failure(e.message)
        except Exception:
            logger.exception("RPC method error", extra={"method": request.method})
            return Outcome.failure(INTERNAL_ERROR)

        return Outcome.success(result)
