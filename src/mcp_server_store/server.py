"""
MCP Store Server implementation.

Composes the JSON-RPC dispatcher and the MCP capability registry, and
exposes a small API for registering tools, resources, and prompts and for
serving over stdio.
"""

from typing import List, Optional

import structlog

from .config.settings import Config
from .mcp.registry import CapabilityRegistry, PromptHandler, ResourceHandler, ToolHandler
from .mcp.types import Implementation, Prompt, Resource, ServerCapabilities, Tool
from .protocol.dispatcher import Dispatcher
from .protocol.transport import StdioTransport
from .tools.base import BaseTool
from .utils.logging import LoggingContext

logger = structlog.get_logger(__name__)


class MCPStoreServer:
    """
    Top-level MCP server.

    Collaborators register tools, resources, and prompts before serving.
    ``serve_stdio`` wires the MCP methods onto the dispatcher once, based
    on what was registered, and then runs the transport loop.
    """

    def __init__(
        self,
        name: str,
        version: str,
        instructions: Optional[str] = None,
        logging_context: Optional[LoggingContext] = None,
    ):
        """
        Initialize the MCP server.

        Args:
            name: Server name reported by initialize
            version: Server version reported by initialize
            instructions: Optional free-text instructions for the client
            logging_context: Logging verbosity handle; adjusted by logging/setLevel
        """
        self.server_info = Implementation(name=name, version=version)
        self.instructions = instructions
        self.logging_context = logging_context or LoggingContext()

        self.dispatcher = Dispatcher()
        self.registry = CapabilityRegistry(
            server_info=self.server_info,
            instructions=instructions,
            logging_context=self.logging_context,
        )

    @classmethod
    def from_config(
        cls, config: Config, logging_context: Optional[LoggingContext] = None
    ) -> "MCPStoreServer":
        return cls(
            name=config.server.name,
            version=config.server.version,
            instructions=config.server.instructions,
            logging_context=logging_context,
        )

    # Registration

    def register_tool(self, tool: Tool, handler: ToolHandler) -> None:
        self.registry.register_tool(tool, handler)

    def register_base_tool(self, tool: BaseTool) -> None:
        """Register a ``BaseTool`` under its own schema."""
        self.registry.register_tool(tool.get_schema(), tool)

    def register_resource(self, resource: Resource, handler: ResourceHandler) -> None:
        self.registry.register_resource(resource, handler)

    def register_prompt(self, prompt: Prompt, handler: PromptHandler) -> None:
        self.registry.register_prompt(prompt, handler)

    def list_tools(self) -> List[Tool]:
        """Get registered tools."""
        return self.registry.tools

    @property
    def capabilities(self) -> Optional[ServerCapabilities]:
        return self.registry.capabilities

    # Serving

    def wire(self) -> ServerCapabilities:
        """Build capabilities and register the MCP methods on the dispatcher."""
        return self.registry.register_handlers(self.dispatcher)

    async def serve_stdio(self, transport: Optional[StdioTransport] = None) -> None:
        """
        Wire the MCP methods and serve until end of stream.

        Raises:
            RegistryError: If the server was already wired
            TransportError: If reading or writing a stream fails
        """
        logger.info(
            "Starting MCP server over stdio",
            server=self.server_info.name,
            version=self.server_info.version,
        )

        self.wire()
        await self.dispatcher.serve(transport)
