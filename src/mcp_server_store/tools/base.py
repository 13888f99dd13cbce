"""
Base classes for MCP tools.

Provides the common shape of a tool collaborator: a schema, an async
``execute``, argument validation against the schema, and folding of tool
errors into in-band error results.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import structlog

from ..mcp.types import InputSchema, Property, Tool, ToolCallResult, to_wire

logger = structlog.get_logger(__name__)

_JSON_TYPES = {
    "string": (str,),
    "number": (int, float),
    "integer": (int,),
    "boolean": (bool,),
    "object": (dict,),
    "array": (list,),
}


class ToolError(Exception):
    """Base exception for tool execution errors."""

    def __init__(
        self, message: str, code: str = "tool_error", details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class ToolValidationError(ToolError):
    """Error for invalid tool arguments."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="validation_error", details=details)


class BaseTool(ABC):
    """
    Base class for MCP tools.

    Instances are callable and can be registered directly as tool handlers:
    ``server.register_tool(tool.get_schema(), tool)``.
    """

    name: str = ""
    description: str = ""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.logger = logger.bind(tool=self.name)

    @abstractmethod
    def get_schema(self) -> Tool:
        """Get the tool definition advertised by ``tools/list``."""

    @abstractmethod
    async def execute(self, arguments: Dict[str, Any]) -> ToolCallResult:
        """
        Execute the tool with given arguments.

        Raises:
            ToolError: If execution fails
        """

    async def __call__(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate and execute, returning the wire form of the result.

        ``ToolError`` becomes an ``isError`` result here. Other exceptions
        propagate so the registry reports them the same way.
        """
        self.logger.info("Executing tool", arguments=arguments)

        try:
            self._validate_arguments(arguments)
            result = await self.execute(arguments)
        except ToolError as e:
            self.logger.warning(
                "Tool execution failed",
                error_code=e.code,
                error_message=e.message,
                details=e.details,
            )
            return to_wire(ToolCallResult.error(f"Error: {e.message}"))

        self.logger.info("Tool execution completed", success=not result.isError)
        return to_wire(result)

    def _validate_arguments(self, arguments: Dict[str, Any]) -> None:
        """
        Validate tool arguments against the input schema.

        Raises:
            ToolValidationError: If validation fails
        """
        schema = self.get_schema().inputSchema

        for required_param in schema.required or []:
            if required_param not in arguments:
                raise ToolValidationError(
                    f"Missing required parameter: {required_param}",
                    details={"missing_parameter": required_param},
                )

        properties = schema.properties or {}
        for param_name, param_value in arguments.items():
            if param_name in properties:
                self._validate_parameter(param_name, param_value, properties[param_name])

    def _validate_parameter(self, name: str, value: Any, definition: Property) -> None:
        expected = _JSON_TYPES.get(definition.type)
        # bool is an int subclass but not a JSON number
        is_bool = isinstance(value, bool) and definition.type != "boolean"
        if expected is not None and (is_bool or not isinstance(value, expected)):
            raise ToolValidationError(
                f"Parameter '{name}' must be {_article(definition.type)} {definition.type}",
                details={
                    "parameter": name,
                    "expected_type": definition.type,
                    "actual_type": type(value).__name__,
                },
            )

        if definition.enum and value not in definition.enum:
            raise ToolValidationError(
                f"Parameter '{name}' must be one of: {definition.enum}",
                details={
                    "parameter": name,
                    "allowed_values": definition.enum,
                    "actual_value": value,
                },
            )

    def _create_parameter(
        self,
        param_type: str,
        description: str,
        enum: Optional[List[Any]] = None,
        default: Optional[Any] = None,
    ) -> Property:
        return Property(type=param_type, description=description, enum=enum, default=default)

    def _create_schema(
        self,
        parameters: Optional[Dict[str, Property]] = None,
        required: Optional[List[str]] = None,
    ) -> Tool:
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=InputSchema(
                type="object",
                properties=parameters or None,
                required=required or None,
            ),
        )


def _article(word: str) -> str:
    return "an" if word[:1] in "aeiou" else "a"
