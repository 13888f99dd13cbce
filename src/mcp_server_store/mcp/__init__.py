"""
Model Context Protocol layer.

Data structures for tools, resources, and prompts, and the registry that
serves them over the JSON-RPC dispatcher.
"""

from .types import (
    PROTOCOL_VERSION,
    GetPromptResult,
    Implementation,
    InputSchema,
    LoggingLevel,
    Prompt,
    PromptArgument,
    PromptMessage,
    Property,
    ReadResourceResult,
    Resource,
    ResourceContents,
    ServerCapabilities,
    Tool,
    ToolCallResult,
    image_content,
    text_content,
)
from .registry import CapabilityRegistry, PromptHandler, RegistryError, ResourceHandler, ToolHandler

__all__ = [
    "CapabilityRegistry",
    "RegistryError",
    "ToolHandler",
    "ResourceHandler",
    "PromptHandler",
    "PROTOCOL_VERSION",
    "Implementation",
    "Tool",
    "InputSchema",
    "Property",
    "ToolCallResult",
    "Resource",
    "ResourceContents",
    "ReadResourceResult",
    "Prompt",
    "PromptArgument",
    "PromptMessage",
    "GetPromptResult",
    "ServerCapabilities",
    "LoggingLevel",
    "text_content",
    "image_content",
]
