"""
Main entry point for the MCP Store Server.

This module provides the command-line interface for the MCP server,
handling startup, configuration, and serving over stdio.
"""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click
import structlog

from .config.settings import create_default_config, load_config
from .protocol.transport import TransportError
from .server import MCPStoreServer
from .tools.ping import PingTool
from .utils.logging import setup_logging


def build_server(config_path: Optional[Path] = None, log_level: Optional[str] = None) -> MCPStoreServer:
    """Load configuration, set up logging, and register the built-in tools."""
    config_data = load_config(config_path=config_path)

    if log_level:
        config_data.server.log_level = log_level.upper()

    logging_context = setup_logging(config_data.server.log_level)
    logger = structlog.get_logger()

    logger.info(
        "Starting MCP Store Server",
        version=config_data.server.version,
        config_file=str(config_path) if config_path else "default",
        log_level=config_data.server.log_level,
    )

    server = MCPStoreServer.from_config(config_data, logging_context=logging_context)
    server.register_base_tool(PingTool())

    logger.info("Registered tools", tools=len(server.list_tools()))
    return server


@click.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Set logging level",
)
def serve(config: Optional[Path] = None, log_level: Optional[str] = None) -> None:
    """
    Serve the Model Context Protocol over stdin/stdout.

    Protocol traffic goes to stdout; all diagnostics go to stderr.
    """
    try:
        server = build_server(config, log_level)
    except Exception as e:
        # Logging may not be configured yet; stdout is reserved for protocol traffic
        click.echo(f"Server startup failed: {e}", err=True)
        sys.exit(1)

    logger = structlog.get_logger()

    try:
        asyncio.run(server.serve_stdio())
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
    except TransportError as e:
        logger.error("Server exited with error", error=str(e))
        sys.exit(1)


@click.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(path_type=Path),
    help="Path to save configuration file",
)
def init_config(config: Optional[Path] = None) -> None:
    """Initialize a configuration file with default settings."""
    config_path = config or Path("config.json")

    if config_path.exists():
        click.echo(f"Configuration file already exists: {config_path}")
        if not click.confirm("Overwrite?"):
            return

    try:
        create_default_config(config_path)
    except OSError as e:
        click.echo(f"Failed to create configuration file: {e}", err=True)
        sys.exit(1)

    click.echo(f"Created configuration file: {config_path}")


@click.group()
@click.version_option(package_name="mcp-server-store")
def cli() -> None:
    """MCP Store Server CLI."""
    pass


cli.add_command(serve, name="serve")
cli.add_command(init_config, name="init")


if __name__ == "__main__":
    cli()
