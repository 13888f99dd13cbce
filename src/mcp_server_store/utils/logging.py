"""
Logging utilities for the MCP Store Server.

Provides structured logging configuration for stdio operation and the
process-wide logging context that ``logging/setLevel`` adjusts.
"""

import logging
import sys
from typing import IO, Dict, Optional, Union

import structlog

from ..mcp.types import LoggingLevel

# MCP severities mapped onto stdlib levels. Nothing here terminates the process.
MCP_LEVELS: Dict[LoggingLevel, int] = {
    LoggingLevel.DEBUG: logging.DEBUG,
    LoggingLevel.INFO: logging.INFO,
    LoggingLevel.NOTICE: logging.INFO,
    LoggingLevel.WARNING: logging.WARNING,
    LoggingLevel.ERROR: logging.ERROR,
    LoggingLevel.CRITICAL: logging.CRITICAL,
    LoggingLevel.ALERT: logging.CRITICAL,
    LoggingLevel.EMERGENCY: logging.CRITICAL,
}


def setup_logging(log_level: str = "INFO", stream: Optional[IO] = None) -> "LoggingContext":
    """
    Set up structured logging for the MCP server.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        stream: Output stream, stderr by default

    Returns:
        Logging context bound to the root logger
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Stdout is reserved for protocol traffic
    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stderr,
        level=getattr(logging, log_level.upper()),
        force=True,
    )

    return LoggingContext(level=log_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


class LoggingContext:
    """
    Process-wide logging verbosity.

    Held by the server and handed to the registry, which changes it when a
    client sends ``logging/setLevel``.
    """

    def __init__(
        self, level: Optional[Union[str, int]] = None, logger: Optional[logging.Logger] = None
    ):
        self._logger = logger or logging.getLogger()
        # Without an explicit level the logger keeps whatever it was configured with
        if level is not None:
            self.set_level(level)

    @property
    def level(self) -> int:
        return self._logger.level

    @property
    def level_name(self) -> str:
        return logging.getLevelName(self._logger.level)

    def set_level(self, level: Union[str, int]) -> None:
        """Set the level from a stdlib level name or number."""
        if isinstance(level, str):
            numeric = logging.getLevelName(level.upper())
            if not isinstance(numeric, int):
                raise ValueError(f"Unknown log level: {level}")
            level = numeric
        self._logger.setLevel(level)

    def set_mcp_level(self, level: Union[LoggingLevel, str]) -> int:
        """
        Set the level from an MCP severity.

        Returns:
            The stdlib level now in effect

        Raises:
            ValueError: If the severity is not recognized
        """
        mcp_level = LoggingLevel(level)
        numeric = MCP_LEVELS[mcp_level]
        self._logger.setLevel(numeric)
        return numeric
