"""
MCP Store Server tools.

Tool collaborators exposed through the MCP registry.
"""

from .base import BaseTool, ToolError, ToolValidationError
from .ping import PingTool

__all__ = [
    "BaseTool",
    "ToolError",
    "ToolValidationError",
    "PingTool",
]
