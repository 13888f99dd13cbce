"""
JSON-RPC 2.0 protocol layer for the MCP Store Server.

This module provides the wire codec, the error taxonomy, the method
dispatcher, and the line-framed stdio transport.
"""

from .codec import decode_request, decode_response, encode_response
from .dispatcher import Dispatcher
from .schemas import (
    InternalError,
    InvalidParamsError,
    InvalidRequestError,
    JSONRPCError,
    JSONRPCRequest,
    JSONRPCResponse,
    MethodNotFoundError,
    ParseError,
)
from .transport import StdioTransport, TransportError

__all__ = [
    "Dispatcher",
    "StdioTransport",
    "TransportError",
    "JSONRPCError",
    "ParseError",
    "InvalidRequestError",
    "MethodNotFoundError",
    "InvalidParamsError",
    "InternalError",
    "JSONRPCRequest",
    "JSONRPCResponse",
    "decode_request",
    "decode_response",
    "encode_response",
]
