"""
Model Context Protocol data structures.

Defines tools, resources, prompts, content blocks, capabilities, and the
params/result shapes of every MCP method served by this package.
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

PROTOCOL_VERSION = "2025-11-25"

# Method names
METHOD_INITIALIZE = "initialize"
METHOD_PING = "ping"
METHOD_TOOLS_LIST = "tools/list"
METHOD_TOOLS_CALL = "tools/call"
METHOD_RESOURCES_LIST = "resources/list"
METHOD_RESOURCES_READ = "resources/read"
METHOD_PROMPTS_LIST = "prompts/list"
METHOD_PROMPTS_GET = "prompts/get"
METHOD_LOGGING_SET_LEVEL = "logging/setLevel"
NOTIFICATION_INITIALIZED = "notifications/initialized"


class Implementation(BaseModel):
    """Name and version of an MCP client or server."""

    name: str = Field(description="Implementation name")
    version: str = Field(default="", description="Implementation version")


# Tool structures
class Property(BaseModel):
    """Tool parameter definition."""

    type: str = Field(description="Parameter type")
    description: Optional[str] = Field(default=None, description="Parameter description")
    enum: Optional[List[Any]] = Field(default=None, description="Allowed values")
    default: Optional[Any] = Field(default=None, description="Default value")


class InputSchema(BaseModel):
    """Tool input schema definition."""

    type: str = Field(default="object", description="Schema type")
    properties: Optional[Dict[str, Property]] = Field(default=None, description="Tool parameters")
    required: Optional[List[str]] = Field(default=None, description="Required parameters")


class Tool(BaseModel):
    """Tool definition."""

    name: str = Field(description="Tool name")
    description: Optional[str] = Field(default=None, description="Tool description")
    inputSchema: InputSchema = Field(default_factory=InputSchema, description="Tool input schema")


# Content blocks
class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ImageContent(BaseModel):
    type: Literal["image"] = "image"
    mimeType: str
    data: str = Field(description="Base64-encoded image data")


class ResourceContent(BaseModel):
    type: Literal["resource"] = "resource"
    uri: str


Content = Annotated[
    Union[TextContent, ImageContent, ResourceContent],
    Field(discriminator="type"),
]


def text_content(text: str) -> TextContent:
    """Create a text content block."""
    return TextContent(text=text)


def image_content(mime_type: str, base64_data: str) -> ImageContent:
    """Create an image content block with base64-encoded data."""
    return ImageContent(mimeType=mime_type, data=base64_data)


class ToolCallParams(BaseModel):
    """Params of a ``tools/call`` request."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(default="", description="Tool name")
    arguments: Optional[Dict[str, Any]] = Field(default=None, description="Tool arguments")


class ToolCallResult(BaseModel):
    """Result of tool execution."""

    content: List[Content] = Field(default_factory=list, description="Tool result content")
    isError: Optional[bool] = Field(default=None, description="Whether result is an error")

    @classmethod
    def text(cls, text: str) -> "ToolCallResult":
        return cls(content=[text_content(text)])

    @classmethod
    def error(cls, message: str) -> "ToolCallResult":
        return cls(content=[text_content(message)], isError=True)


# Pagination
class PaginatedParams(BaseModel):
    """Params of the list methods. The cursor is accepted and ignored."""

    model_config = ConfigDict(extra="allow")

    cursor: Optional[str] = None


class ListToolsResult(BaseModel):
    tools: List[Tool]
    nextCursor: Optional[str] = None


# Resource structures
class Resource(BaseModel):
    """A URI-addressed readable content source."""

    uri: str = Field(description="Resource URI")
    name: Optional[str] = Field(default=None, description="Human-readable name")
    description: Optional[str] = Field(default=None, description="Resource description")
    mimeType: Optional[str] = Field(default=None, description="MIME type of the contents")


class ResourceContents(BaseModel):
    """Contents of a resource, either text or base64 blob."""

    uri: str
    mimeType: Optional[str] = None
    text: Optional[str] = None
    blob: Optional[str] = None


class ReadResourceParams(BaseModel):
    model_config = ConfigDict(extra="allow")

    uri: str = ""


class ReadResourceResult(BaseModel):
    contents: List[ResourceContents] = Field(default_factory=list)


class ListResourcesResult(BaseModel):
    resources: List[Resource]
    nextCursor: Optional[str] = None


# Prompt structures
class PromptArgument(BaseModel):
    name: str
    description: Optional[str] = None
    required: Optional[bool] = None


class Prompt(BaseModel):
    """A named, parameterized prompt template."""

    name: str = Field(description="Prompt name")
    description: Optional[str] = Field(default=None, description="Prompt description")
    arguments: Optional[List[PromptArgument]] = Field(default=None, description="Prompt arguments")


class PromptMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: Content


class GetPromptParams(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = ""
    arguments: Optional[Dict[str, str]] = None


class GetPromptResult(BaseModel):
    description: Optional[str] = None
    messages: List[PromptMessage] = Field(default_factory=list)


class ListPromptsResult(BaseModel):
    prompts: List[Prompt]
    nextCursor: Optional[str] = None


# Capabilities
class ToolsCapability(BaseModel):
    listChanged: bool = False


class ResourcesCapability(BaseModel):
    subscribe: bool = False
    listChanged: bool = False


class PromptsCapability(BaseModel):
    listChanged: bool = False


class LoggingCapability(BaseModel):
    pass


class ServerCapabilities(BaseModel):
    """Method families this server supports. Absent fields are unsupported."""

    tools: Optional[ToolsCapability] = None
    resources: Optional[ResourcesCapability] = None
    prompts: Optional[PromptsCapability] = None
    logging: LoggingCapability = Field(default_factory=LoggingCapability)


class ClientCapabilities(BaseModel):
    model_config = ConfigDict(extra="allow")

    experimental: Optional[Dict[str, Any]] = None
    sampling: Optional[Dict[str, Any]] = None
    roots: Optional[Dict[str, Any]] = None


# Initialize protocol
class InitializeParams(BaseModel):
    """Params of the ``initialize`` request."""

    model_config = ConfigDict(extra="allow")

    protocolVersion: str = Field(default="", description="Client protocol version")
    capabilities: ClientCapabilities = Field(default_factory=ClientCapabilities)
    clientInfo: Optional[Implementation] = Field(default=None, description="Client info")


class InitializeResult(BaseModel):
    protocolVersion: str = PROTOCOL_VERSION
    capabilities: ServerCapabilities
    serverInfo: Implementation
    instructions: Optional[str] = None


# Logging
class LoggingLevel(str, Enum):
    """Syslog severities used by ``logging/setLevel``."""

    DEBUG = "debug"
    INFO = "info"
    NOTICE = "notice"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"
    ALERT = "alert"
    EMERGENCY = "emergency"


class SetLevelParams(BaseModel):
    model_config = ConfigDict(extra="allow")

    level: LoggingLevel


def to_wire(model: BaseModel) -> Dict[str, Any]:
    """Dump a model for the wire, omitting absent fields."""
    return model.model_dump(exclude_none=True)
