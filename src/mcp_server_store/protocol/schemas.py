"""
JSON-RPC 2.0 message schemas and error taxonomy.

Defines the request/response envelopes exchanged over the wire and the
fixed set of protocol errors a response can carry.
"""

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr

JSONRPC_VERSION = "2.0"

# Error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

RequestId = Union[StrictInt, StrictFloat, StrictStr]


class JSONRPCError(Exception):
    """Base exception for JSON-RPC protocol errors."""

    code: int = INTERNAL_ERROR

    def __init__(self, message: str, data: Any = None, code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.data = data
        if code is not None:
            self.code = code

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to JSON-RPC error format."""
        error_dict: Dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.data is not None:
            error_dict["data"] = self.data
        return error_dict

    def to_error_object(self) -> "ErrorObject":
        return ErrorObject(code=self.code, message=self.message, data=self.data)


class ParseError(JSONRPCError):
    """Error for input that is not valid JSON."""

    code = PARSE_ERROR


class InvalidRequestError(JSONRPCError):
    """Error for a JSON document that is not a valid request."""

    code = INVALID_REQUEST

    def __init__(
        self,
        message: str,
        data: Any = None,
        request_id: Optional[Any] = None,
        notification: bool = False,
    ):
        super().__init__(message, data=data)
        self.request_id = request_id
        self.notification = notification


class MethodNotFoundError(JSONRPCError):
    """Error for unknown method calls."""

    code = METHOD_NOT_FOUND

    def __init__(self, method: str):
        super().__init__(f"Method '{method}' not found")
        self.method = method


class InvalidParamsError(JSONRPCError):
    """Error for invalid request parameters."""

    code = INVALID_PARAMS


class InternalError(JSONRPCError):
    """Error for internal server issues."""

    code = INTERNAL_ERROR


class ErrorObject(BaseModel):
    """The error member of a JSON-RPC response."""

    code: int = Field(description="Error code")
    message: str = Field(description="Short error description")
    data: Optional[Any] = Field(default=None, description="Additional error information")

    def to_dict(self) -> Dict[str, Any]:
        error_dict: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error_dict["data"] = self.data
        return error_dict


class JSONRPCRequest(BaseModel):
    """
    A JSON-RPC request or notification.

    Fields are decoded leniently so that envelope problems (wrong version,
    missing method) can be reported with the request id still attached.
    """

    model_config = ConfigDict(extra="allow")

    jsonrpc: Optional[StrictStr] = Field(default=None, description="JSON-RPC version")
    method: StrictStr = Field(default="", description="Method name")
    params: Optional[Any] = Field(default=None, description="Method parameters")
    id: Optional[RequestId] = Field(default=None, description="Request ID")

    @property
    def is_notification(self) -> bool:
        """A request without an id never gets a response."""
        return self.id is None

    def validate_envelope(self) -> None:
        """
        Check the JSON-RPC envelope.

        Raises:
            InvalidRequestError: If the version or method is wrong
        """
        if self.jsonrpc != JSONRPC_VERSION:
            raise InvalidRequestError(
                "Invalid JSON-RPC version",
                request_id=self.id,
                notification=self.is_notification,
            )
        if not self.method:
            raise InvalidRequestError(
                "Method is required",
                request_id=self.id,
                notification=self.is_notification,
            )


class JSONRPCResponse(BaseModel):
    """A JSON-RPC response carrying exactly one of result or error."""

    jsonrpc: str = Field(default=JSONRPC_VERSION, description="JSON-RPC version")
    result: Optional[Any] = Field(default=None, description="Response result")
    error: Optional[ErrorObject] = Field(default=None, description="Error information")
    id: Optional[RequestId] = Field(default=None, description="Request ID")

    @classmethod
    def success(cls, request_id: Optional[Any], result: Any) -> "JSONRPCResponse":
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: Optional[Any], error: JSONRPCError) -> "JSONRPCResponse":
        return cls(id=request_id, error=error.to_error_object())

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-RPC 2.0: a response has either result OR error, never both."""
        message: Dict[str, Any] = {"jsonrpc": self.jsonrpc}
        if self.error is not None:
            message["error"] = self.error.to_dict()
        else:
            message["result"] = self.result
        message["id"] = self.id
        return message
