"""
Transport layer for JSON-RPC communication.

Implements newline-delimited framing over a pair of streams, by default the
binary buffers behind the process's stdin/stdout. Lines are read as raw bytes
so that undecodable input reaches the codec as a parse error instead of
breaking the stream. Stdout carries protocol traffic only.
"""

import asyncio
import io
import sys
from typing import IO, Optional, Union

import structlog

logger = structlog.get_logger(__name__)


def _binary(stream: IO) -> IO:
    # Text wrappers decode strictly; go around them when a byte buffer is exposed
    return getattr(stream, "buffer", stream)


class TransportError(Exception):
    """Base exception for transport errors."""

    pass


class StdioTransport:
    """
    Line-framed transport over a reader/writer stream pair.

    Each inbound message is one line; each outbound message is written as
    one line and flushed immediately.
    """

    def __init__(
        self,
        reader: Optional[IO] = None,
        writer: Optional[IO] = None,
    ):
        self._reader = _binary(reader if reader is not None else sys.stdin)
        self._writer = _binary(writer if writer is not None else sys.stdout)
        self._text_writer = isinstance(self._writer, io.TextIOBase)
        self._closed = False

    async def read_line(self) -> Optional[Union[str, bytes]]:
        """
        Read the next line from the input stream.

        Returns:
            The raw line including its terminator, or None at end of stream

        Raises:
            TransportError: If reading fails for any reason other than EOF
        """
        if self._closed:
            return None

        loop = asyncio.get_running_loop()
        try:
            line = await loop.run_in_executor(None, self._reader.readline)
        except (OSError, ValueError) as e:
            logger.error("Error reading from input stream", error=str(e))
            raise TransportError(f"Failed to read message: {e}") from e

        if not line:
            logger.info("Received EOF on input stream")
            self._closed = True
            return None

        return line

    def write_line(self, message_json: str) -> None:
        """Write one message with a trailing newline and flush."""
        try:
            data = message_json + "\n"
            self._writer.write(data if self._text_writer else data.encode("utf-8"))
            self._writer.flush()
        except (OSError, ValueError) as e:
            logger.error("Failed to write message", error=str(e))
            raise TransportError(f"Failed to write message: {e}") from e

        logger.debug("Sent message", size=len(message_json))

    def close(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed
