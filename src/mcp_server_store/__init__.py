"""
MCP Store Server

A Model Context Protocol server speaking newline-delimited JSON-RPC 2.0
over stdio, exposing registered tools, resources, and prompts.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .config.settings import Config, load_config
from .server import MCPStoreServer

__all__ = [
    "MCPStoreServer",
    "Config",
    "load_config",
    "__version__",
    "__license__",
]
