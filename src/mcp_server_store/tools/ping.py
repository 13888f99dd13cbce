"""
Ping tool for the MCP Store Server.

A liveness check the client model can call; it always answers "pong".
"""

from typing import Any, Dict

from ..mcp.types import Tool, ToolCallResult
from .base import BaseTool


class PingTool(BaseTool):
    """Returns pong."""

    name = "ping"
    description = "A simple ping tool that returns pong."

    def get_schema(self) -> Tool:
        return self._create_schema()

    async def execute(self, arguments: Dict[str, Any]) -> ToolCallResult:
        return ToolCallResult.text("pong")
