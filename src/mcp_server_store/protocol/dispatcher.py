"""
JSON-RPC method dispatcher.

Maps method names to handler callables, turns handler outcomes into
responses, and runs the sequential read/dispatch/write loop.
"""

import inspect
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

import structlog
from pydantic import BaseModel

from .codec import decode_request, encode_response
from .schemas import (
    InternalError,
    InvalidRequestError,
    JSONRPCError,
    JSONRPCRequest,
    JSONRPCResponse,
    MethodNotFoundError,
    ParseError,
)
from .transport import StdioTransport, TransportError

logger = structlog.get_logger(__name__)

MethodHandler = Callable[[Any], Union[Any, Awaitable[Any]]]


def to_result(value: Any) -> Any:
    """Render a handler return value as plain JSON-compatible data."""
    if isinstance(value, BaseModel):
        return value.model_dump(exclude_none=True)
    return value


class Dispatcher:
    """
    Routes JSON-RPC requests to registered method handlers.

    Handlers receive the raw, uninterpreted ``params`` payload. They may be
    plain functions or coroutine functions. A handler signals a protocol
    failure by raising a ``JSONRPCError``; any other exception is reported
    as an internal error.
    """

    def __init__(self) -> None:
        self._methods: Dict[str, MethodHandler] = {}

    def register_method(self, method: str, handler: MethodHandler) -> None:
        """
        Register a handler for a method name.

        The last registration for a name wins. Registration must finish
        before the transport loop starts.
        """
        self._methods[method] = handler
        logger.info("Registered method", method=method)

    @property
    def methods(self) -> List[str]:
        return list(self._methods)

    def has_method(self, method: str) -> bool:
        return method in self._methods

    async def handle_request(self, request: JSONRPCRequest) -> JSONRPCResponse:
        """
        Handle a decoded request.

        Args:
            request: Incoming request

        Returns:
            Response for the request (the caller decides whether to send it)
        """
        logger.debug(
            "Handling request",
            method=request.method,
            request_id=request.id,
        )

        try:
            request.validate_envelope()
        except JSONRPCError as e:
            return JSONRPCResponse.failure(request.id, e)

        handler = self._methods.get(request.method)
        if handler is None:
            logger.warning("Method not found", method=request.method, request_id=request.id)
            return JSONRPCResponse.failure(request.id, MethodNotFoundError(request.method))

        try:
            result = handler(request.params)
            if inspect.isawaitable(result):
                result = await result

        except JSONRPCError as e:
            logger.warning(
                "Protocol error handling request",
                method=request.method,
                request_id=request.id,
                error_code=e.code,
                error_message=e.message,
            )
            return JSONRPCResponse.failure(request.id, e)

        except Exception as e:
            logger.error(
                "Unexpected error handling request",
                method=request.method,
                request_id=request.id,
                error=str(e),
                exc_info=True,
            )
            return JSONRPCResponse.failure(request.id, InternalError("Internal error", data=str(e)))

        return JSONRPCResponse.success(request.id, to_result(result))

    async def process_line(self, line: Union[str, bytes]) -> Optional[JSONRPCResponse]:
        """
        Decode and dispatch one inbound line.

        Returns:
            The response to write, or None when nothing must be sent
        """
        try:
            request = decode_request(line)
        except ParseError as e:
            logger.error("Invalid JSON received", error=e.data)
            return JSONRPCResponse.failure(None, e)
        except InvalidRequestError as e:
            logger.error("Invalid request received", error=e.message)
            if e.notification:
                return None
            return JSONRPCResponse.failure(e.request_id, e)

        response = await self.handle_request(request)

        if request.is_notification:
            if response.is_error:
                logger.warning(
                    "Notification failed",
                    method=request.method,
                    error=response.error.message,
                )
            return None

        return response

    async def serve(self, transport: Optional[StdioTransport] = None) -> None:
        """
        Run the read/dispatch/write loop until end of stream.

        Messages are processed strictly one at a time. A failing message
        never stops the loop; only a transport failure does.

        Raises:
            TransportError: If reading or writing a stream fails
        """
        transport = transport or StdioTransport()
        logger.info("Starting JSON-RPC server over stdio")

        while True:
            try:
                line = await transport.read_line()
            except TransportError:
                logger.error("Transport loop stopped on read failure", exc_info=True)
                raise

            if line is None:
                break

            if not line.strip():
                continue

            logger.debug("Read request", size=len(line))

            response = await self.process_line(line)
            if response is None:
                continue

            message_json = encode_response(response)
            if message_json is not None:
                transport.write_line(message_json)

        logger.info("JSON-RPC server over stdio stopped")
