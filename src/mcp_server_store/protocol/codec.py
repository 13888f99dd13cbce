"""
Line codec for JSON-RPC messages.

One JSON document per line in each direction. Decoding turns a raw line
into a request model; encoding turns a response into a single line of
compact JSON without the trailing newline.
"""

import json
from typing import Any, Optional, Union

import structlog
from pydantic import ValidationError

from .schemas import InvalidRequestError, JSONRPCRequest, JSONRPCResponse, ParseError

logger = structlog.get_logger(__name__)


def _reject_constant(name: str) -> Any:
    raise ParseError("Parse error", data=f"Invalid JSON constant: {name}")


def _load(line: Union[str, bytes]) -> Any:
    if isinstance(line, bytes):
        try:
            line = line.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError("Parse error", data=str(e))
    try:
        return json.loads(line, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise ParseError("Parse error", data=str(e))


def recover_id(message: Any) -> Optional[Any]:
    """Best-effort extraction of a usable request id from a raw message."""
    if not isinstance(message, dict):
        return None
    request_id = message.get("id")
    if isinstance(request_id, bool):
        return None
    if isinstance(request_id, (str, int, float)):
        return request_id
    return None


def is_notification(message: Any) -> bool:
    """A JSON object with no id (or a null id) is a notification."""
    return isinstance(message, dict) and message.get("id") is None


def decode_request(line: Union[str, bytes]) -> JSONRPCRequest:
    """
    Decode one line into a request.

    Args:
        line: Raw line read from the transport

    Returns:
        Parsed request (envelope not yet validated)

    Raises:
        ParseError: If the line is not valid JSON
        InvalidRequestError: If the JSON is not shaped like a request
    """
    message = _load(line)

    if not isinstance(message, dict):
        raise InvalidRequestError("Request must be a JSON object")

    try:
        return JSONRPCRequest.model_validate(message)
    except ValidationError as e:
        raise InvalidRequestError(
            "Invalid request",
            data=str(e),
            request_id=recover_id(message),
            notification=is_notification(message),
        )


def decode_response(line: Union[str, bytes]) -> JSONRPCResponse:
    """Decode one line into a response."""
    message = _load(line)
    try:
        return JSONRPCResponse.model_validate(message)
    except ValidationError as e:
        raise InvalidRequestError("Invalid response", data=str(e), request_id=recover_id(message))


def encode_response(response: JSONRPCResponse) -> Optional[str]:
    """
    Encode a response as a single line of JSON.

    Returns None when the response cannot be serialized. Such a response
    cannot itself be reported as a JSON-RPC error, so it is logged and
    dropped.
    """
    try:
        return json.dumps(response.to_dict(), separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as e:
        logger.error(
            "Failed to encode response",
            request_id=response.id,
            error=str(e),
        )
        return None
