"""Newline-delimited JSON message codec.

Each frame is one UTF-8 JSON object terminated by ``\\n``. Requests carry
``id``, ``method`` and ``params``; responses always carry ``id``, ``result``
and ``error``.
"""

import json
from dataclasses import dataclass, field
from typing import Any

FRAME_DELIMITER = b"\n"

UNKNOWN_METHOD = "Unknown method"
INTERNAL_ERROR = "Internal error"


class DecodeError(Exception):
    """A frame could not be decoded into a request."""

    def __init__(self, message: str, request_id: int | None = None):
        super().__init__(message)
        self.message = message
        self.request_id = request_id


class EncodeError(Exception):
    """A response holds a value that cannot be represented as JSON."""


class FrameTooLarge(Exception):
    """A frame exceeded the configured maximum size."""


@dataclass
class Request:
    """A single method call."""

    id: int
    method: str
    params: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "method": self.method, "params": self.params}


@dataclass
class Response:
    """Reply correlated to a request by ``id``."""

    id: int | None
    result: Any = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        # Both fields are always present; result is null when error is set
        return {
            "id": self.id,
            "result": None if self.error is not None else self.result,
            "error": self.error,
        }

    @classmethod
    def success(cls, id: int | None, result: Any) -> "Response":
        return cls(id=id, result=result)

    @classmethod
    def failure(cls, id: int | None, message: str) -> "Response":
        return cls(id=id, result=None, error=message)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _reject_constant(name: str) -> Any:
    # json.loads accepts NaN/Infinity by default; they are not JSON
    raise DecodeError(f"Invalid JSON: {name} is not a valid value")


def _load_object(raw_line: bytes) -> dict[str, Any]:
    try:
        text = raw_line.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"Invalid UTF-8: {e}") from None

    try:
        payload = json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Invalid JSON: {e}") from None

    if not isinstance(payload, dict):
        raise DecodeError("Frame must be a JSON object")
    return payload


def decode_request(raw_line: bytes) -> Request:
    """Decode one frame into a request.

    Args:
        raw_line: A complete frame, with or without its trailing newline.

    Returns:
        The decoded request.

    Raises:
        DecodeError: If the frame is not a well-formed request.
    """
    payload = _load_object(raw_line)

    request_id = payload.get("id")
    if not _is_int(request_id):
        raise DecodeError("Missing or non-integer id")

    method = payload.get("method")
    if not isinstance(method, str) or not method:
        raise DecodeError("Missing or invalid method", request_id=request_id)

    if "params" not in payload:
        raise DecodeError("Missing params", request_id=request_id)
    params = payload["params"]
    if not isinstance(params, list):
        raise DecodeError("Params must be an array", request_id=request_id)

    return Request(id=request_id, method=method, params=params)


def decode_response(raw_line: bytes) -> Response:
    """Decode one frame into a response (client side)."""
    payload = _load_object(raw_line)

    response_id = payload.get("id")
    if response_id is not None and not _is_int(response_id):
        raise DecodeError("Non-integer id")

    error = payload.get("error")
    if error is not None and not isinstance(error, str):
        raise DecodeError("Error must be a string or null", request_id=response_id)

    return Response(id=response_id, result=payload.get("result"), error=error)


def _dump(payload: dict[str, Any]) -> bytes:
    try:
        text = json.dumps(payload, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as e:
        raise EncodeError(f"Cannot encode message: {e}") from e
    return text.encode("utf-8") + FRAME_DELIMITER


def encode_response(response: Response) -> bytes:
    """Encode a response as a newline-terminated frame.

    Raises:
        EncodeError: If the result is not JSON-representable.
    """
    return _dump(response.to_dict())


def encode_request(request: Request) -> bytes:
    """Encode a request as a newline-terminated frame."""
    return _dump(request.to_dict())
