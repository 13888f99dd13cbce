"""
MCP capability registry.

Holds the tools, resources, and prompts exposed by the server together with
their handlers, derives the advertised capability set, and implements the
MCP methods on top of the JSON-RPC dispatcher.
"""

import inspect
import threading
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Type, TypeVar, Union

import structlog
from pydantic import BaseModel, ValidationError

from ..protocol.dispatcher import Dispatcher
from ..protocol.schemas import InternalError, InvalidParamsError
from ..utils.logging import LoggingContext
from .types import (
    METHOD_INITIALIZE,
    METHOD_LOGGING_SET_LEVEL,
    METHOD_PING,
    METHOD_PROMPTS_GET,
    METHOD_PROMPTS_LIST,
    METHOD_RESOURCES_LIST,
    METHOD_RESOURCES_READ,
    METHOD_TOOLS_CALL,
    METHOD_TOOLS_LIST,
    NOTIFICATION_INITIALIZED,
    PROTOCOL_VERSION,
    GetPromptParams,
    GetPromptResult,
    Implementation,
    InitializeParams,
    InitializeResult,
    ListPromptsResult,
    ListResourcesResult,
    ListToolsResult,
    LoggingCapability,
    PaginatedParams,
    Prompt,
    PromptsCapability,
    ReadResourceParams,
    ReadResourceResult,
    Resource,
    ResourcesCapability,
    ServerCapabilities,
    SetLevelParams,
    Tool,
    ToolCallParams,
    ToolCallResult,
    ToolsCapability,
    to_wire,
)

logger = structlog.get_logger(__name__)

ToolHandler = Callable[[Dict[str, Any]], Union[Any, Awaitable[Any]]]
ResourceHandler = Callable[[str], Union[Any, Awaitable[Any]]]
PromptHandler = Callable[[Dict[str, str]], Union[Any, Awaitable[Any]]]

P = TypeVar("P", bound=BaseModel)


class RegistryError(Exception):
    """Raised when the registry is used out of order."""

    pass


async def _invoke(handler: Callable[..., Any], *args: Any) -> Any:
    result = handler(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def _parse_params(model: Type[P], params: Any, what: str, required: bool = True) -> P:
    """Validate a raw params payload, raising InvalidParams on failure."""
    if params is None and not required:
        params = {}
    if not isinstance(params, dict):
        raise InvalidParamsError(f"Invalid {what} params", data="params must be an object")
    try:
        return model.model_validate(params)
    except ValidationError as e:
        raise InvalidParamsError(f"Invalid {what} params", data=str(e))


def _coerce_tool_result(result: Any) -> ToolCallResult:
    """Normalize whatever a tool handler returned into a ToolCallResult."""
    if isinstance(result, ToolCallResult):
        return result
    if result is None:
        return ToolCallResult()
    if isinstance(result, Mapping) and "content" in result:
        return ToolCallResult.model_validate(dict(result))
    text = result if isinstance(result, str) else str(result)
    return ToolCallResult.text(text)


class CapabilityRegistry:
    """
    Registry of MCP tools, resources, and prompts.

    Entries are registered once at startup. ``register_handlers`` then
    computes the capability set and wires the MCP methods onto a
    dispatcher; that happens exactly once.
    """

    def __init__(
        self,
        server_info: Implementation,
        instructions: Optional[str] = None,
        logging_context: Optional[LoggingContext] = None,
    ):
        self.server_info = server_info
        self.instructions = instructions or None
        self.logging_context = logging_context or LoggingContext()

        self._tools: Dict[str, Tool] = {}
        self._tool_handlers: Dict[str, ToolHandler] = {}
        self._resources: Dict[str, Resource] = {}
        self._resource_handlers: Dict[str, ResourceHandler] = {}
        self._prompts: Dict[str, Prompt] = {}
        self._prompt_handlers: Dict[str, PromptHandler] = {}

        self._lock = threading.RLock()
        self._capabilities: Optional[ServerCapabilities] = None

    # Registration

    def register_tool(self, tool: Tool, handler: ToolHandler) -> None:
        """
        Register a tool with its handler.

        Args:
            tool: Tool definition
            handler: Callable taking the argument mapping
        """
        with self._lock:
            self._tools[tool.name] = tool
            self._tool_handlers[tool.name] = handler
        logger.info("Registered tool", tool_name=tool.name)

    def register_resource(self, resource: Resource, handler: ResourceHandler) -> None:
        with self._lock:
            self._resources[resource.uri] = resource
            self._resource_handlers[resource.uri] = handler
        logger.info("Registered resource", resource_uri=resource.uri)

    def register_prompt(self, prompt: Prompt, handler: PromptHandler) -> None:
        with self._lock:
            self._prompts[prompt.name] = prompt
            self._prompt_handlers[prompt.name] = handler
        logger.info("Registered prompt", prompt_name=prompt.name)

    @property
    def tools(self) -> List[Tool]:
        """Get list of registered tools."""
        with self._lock:
            return list(self._tools.values())

    @property
    def resources(self) -> List[Resource]:
        with self._lock:
            return list(self._resources.values())

    @property
    def prompts(self) -> List[Prompt]:
        with self._lock:
            return list(self._prompts.values())

    # Capabilities

    def build_capabilities(self) -> ServerCapabilities:
        """Derive the capability set from what is currently registered."""
        with self._lock:
            return ServerCapabilities(
                tools=ToolsCapability() if self._tools else None,
                resources=ResourcesCapability() if self._resources else None,
                prompts=PromptsCapability() if self._prompts else None,
                logging=LoggingCapability(),
            )

    @property
    def capabilities(self) -> Optional[ServerCapabilities]:
        """Capability set computed at wiring time, None before that."""
        return self._capabilities

    @property
    def wired(self) -> bool:
        return self._capabilities is not None

    def register_handlers(self, dispatcher: Dispatcher) -> ServerCapabilities:
        """
        Compute capabilities and wire every supported MCP method.

        Method families whose registry is empty at this point are not
        wired at all.

        Raises:
            RegistryError: If the handlers were already wired
        """
        if self._capabilities is not None:
            raise RegistryError("MCP handlers are already wired")

        capabilities = self.build_capabilities()
        self._capabilities = capabilities

        dispatcher.register_method(METHOD_INITIALIZE, self.handle_initialize)
        dispatcher.register_method(METHOD_PING, self.handle_ping)

        if capabilities.tools is not None:
            dispatcher.register_method(METHOD_TOOLS_LIST, self.handle_tools_list)
            dispatcher.register_method(METHOD_TOOLS_CALL, self.handle_tools_call)

        if capabilities.resources is not None:
            dispatcher.register_method(METHOD_RESOURCES_LIST, self.handle_resources_list)
            dispatcher.register_method(METHOD_RESOURCES_READ, self.handle_resources_read)

        if capabilities.prompts is not None:
            dispatcher.register_method(METHOD_PROMPTS_LIST, self.handle_prompts_list)
            dispatcher.register_method(METHOD_PROMPTS_GET, self.handle_prompts_get)

        dispatcher.register_method(NOTIFICATION_INITIALIZED, self.handle_initialized)
        dispatcher.register_method(METHOD_LOGGING_SET_LEVEL, self.handle_set_level)

        logger.info("MCP handlers wired", capabilities=to_wire(capabilities))
        return capabilities

    # Lifecycle methods

    async def handle_initialize(self, params: Any) -> Dict[str, Any]:
        """Handle initialize request."""
        init = _parse_params(InitializeParams, params, "initialize")

        logger.info(
            "Client initializing",
            client=init.clientInfo.name if init.clientInfo else None,
            client_version=init.clientInfo.version if init.clientInfo else None,
            protocol_version=init.protocolVersion,
        )

        result = InitializeResult(
            protocolVersion=PROTOCOL_VERSION,
            capabilities=self._capabilities or self.build_capabilities(),
            serverInfo=self.server_info,
            instructions=self.instructions,
        )
        return to_wire(result)

    async def handle_ping(self, params: Any) -> Dict[str, Any]:
        return {}

    async def handle_initialized(self, params: Any) -> None:
        logger.info("Client initialized successfully")
        return None

    async def handle_set_level(self, params: Any) -> Dict[str, Any]:
        """Handle logging/setLevel request."""
        request = _parse_params(SetLevelParams, params, "logging")
        self.logging_context.set_mcp_level(request.level)
        logger.info("Log level updated", level=request.level.value)
        return {}

    # Tools

    async def handle_tools_list(self, params: Any) -> Dict[str, Any]:
        _parse_params(PaginatedParams, params, "tools list", required=False)
        tools = self.tools
        logger.info("Listing tools", count=len(tools))
        return to_wire(ListToolsResult(tools=tools))

    async def handle_tools_call(self, params: Any) -> Dict[str, Any]:
        """
        Handle tools/call request.

        Tool execution failures are returned as an ``isError`` result, not
        as a JSON-RPC error, so the calling model can see them.
        """
        request = _parse_params(ToolCallParams, params, "tool call")
        arguments = request.arguments or {}

        logger.info("Calling tool", tool_name=request.name, arguments=arguments)

        with self._lock:
            handler = self._tool_handlers.get(request.name)

        if handler is None:
            logger.warning("Tool not found", tool_name=request.name)
            raise InvalidParamsError(f"Tool '{request.name}' not found")

        try:
            result = _coerce_tool_result(await _invoke(handler, arguments))
        except Exception as e:
            logger.error(
                "Tool execution failed",
                tool_name=request.name,
                error=str(e),
                exc_info=True,
            )
            result = ToolCallResult.error(str(e))

        logger.info(
            "Tool execution completed",
            tool_name=request.name,
            success=not result.isError,
        )
        return to_wire(result)

    # Resources

    async def handle_resources_list(self, params: Any) -> Dict[str, Any]:
        _parse_params(PaginatedParams, params, "resources list", required=False)
        return to_wire(ListResourcesResult(resources=self.resources))

    async def handle_resources_read(self, params: Any) -> Dict[str, Any]:
        request = _parse_params(ReadResourceParams, params, "resource read")

        with self._lock:
            handler = self._resource_handlers.get(request.uri)

        if handler is None:
            raise InvalidParamsError(f"Resource '{request.uri}' not found")

        try:
            result = await _invoke(handler, request.uri)
            if not isinstance(result, ReadResourceResult):
                result = ReadResourceResult.model_validate(result)
        except Exception as e:
            logger.error("Resource read failed", resource_uri=request.uri, error=str(e))
            raise InternalError("Failed to read resource", data=str(e))

        return to_wire(result)

    # Prompts

    async def handle_prompts_list(self, params: Any) -> Dict[str, Any]:
        _parse_params(PaginatedParams, params, "prompts list", required=False)
        return to_wire(ListPromptsResult(prompts=self.prompts))

    async def handle_prompts_get(self, params: Any) -> Dict[str, Any]:
        request = _parse_params(GetPromptParams, params, "prompt get")

        with self._lock:
            handler = self._prompt_handlers.get(request.name)

        if handler is None:
            raise InvalidParamsError(f"Prompt '{request.name}' not found")

        try:
            result = await _invoke(handler, request.arguments or {})
            if not isinstance(result, GetPromptResult):
                result = GetPromptResult.model_validate(result)
        except Exception as e:
            logger.error("Prompt resolution failed", prompt_name=request.name, error=str(e))
            raise InternalError("Failed to get prompt", data=str(e))

        return to_wire(result)
