"""Utility modules."""

from .logging import LoggingContext, get_logger, setup_logging

__all__ = [
    "setup_logging",
    "get_logger",
    "LoggingContext",
]
