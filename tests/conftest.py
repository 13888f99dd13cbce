"""
Pytest configuration and fixtures for MCP Store Server tests.
"""

import io
import json
import logging

import pytest

from mcp_server_store.mcp.registry import CapabilityRegistry
from mcp_server_store.mcp.types import (
    InputSchema,
    Implementation,
    Property,
    Tool,
    ToolCallResult,
)
from mcp_server_store.protocol.dispatcher import Dispatcher
from mcp_server_store.protocol.transport import StdioTransport
from mcp_server_store.server import MCPStoreServer
from mcp_server_store.utils.logging import LoggingContext


@pytest.fixture
def logging_context():
    """Logging context bound to a private logger so tests don't touch root."""
    return LoggingContext(level="INFO", logger=logging.getLogger("mcp_server_store.tests"))


@pytest.fixture
def registry(logging_context):
    """Create a registry instance."""
    return CapabilityRegistry(
        server_info=Implementation(name="test-server", version="9.9.9"),
        instructions="Test instructions",
        logging_context=logging_context,
    )


@pytest.fixture
def dispatcher():
    return Dispatcher()


@pytest.fixture
def server(logging_context):
    return MCPStoreServer("test-server", "9.9.9", logging_context=logging_context)


@pytest.fixture
def sample_tool():
    """Create a sample tool for testing."""
    return Tool(
        name="echo",
        description="Echoes a message",
        inputSchema=InputSchema(
            properties={"message": Property(type="string", description="Message to echo")},
            required=["message"],
        ),
    )


@pytest.fixture
def echo_handler():
    def handler(arguments):
        return ToolCallResult.text(arguments.get("message", ""))

    return handler


def _make_transport(*messages):
    lines = []
    for message in messages:
        lines.append(message if isinstance(message, str) else json.dumps(message))
    reader = io.StringIO("".join(line + "\n" for line in lines))
    writer = io.StringIO()
    return StdioTransport(reader=reader, writer=writer), writer


def _written_messages(writer):
    output = writer.getvalue()
    assert output == "" or output.endswith("\n")
    return [json.loads(line) for line in output.splitlines()]


@pytest.fixture
def make_transport():
    """Build an in-memory transport fed with the given messages, one per line."""
    return _make_transport


@pytest.fixture
def written_messages():
    """Parse every line written to an in-memory writer."""
    return _written_messages
