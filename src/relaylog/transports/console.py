"""
Console transport: human-readable lines routed to a stream per severity.
"""

from __future__ import annotations

import sys
from typing import Any, Callable, Dict, Mapping, Optional

from ..formatters import format_console_line
from ..types import LogLevel, LogRecord
from .base import Transport

StreamFactory = Callable[[], Any]

# Resolved lazily so that a swapped sys.stdout/sys.stderr is honoured.
DEFAULT_STREAMS: Dict[LogLevel, StreamFactory] = {
    LogLevel.ERROR: lambda: sys.stderr,
    LogLevel.WARN: lambda: sys.stderr,
    LogLevel.INFO: lambda: sys.stdout,
    LogLevel.DEBUG: lambda: sys.stdout,
    LogLevel.TRACE: lambda: sys.stdout,
}


class ConsoleTransport(Transport):
    """Writes ``[timestamp] [LEVEL] message meta`` to the level's stream.

    Args:
        enable_colors: Wrap the prefix in the level's ANSI color.
        enable_timestamp: Include the ``[timestamp]`` column.
        streams: Per-level overrides. Values are streams or zero-argument
            callables returning a stream.
        origin: Optional tag rendered as ``[ORIGIN]`` after the level.
    """

    def __init__(
        self,
        enable_colors: bool = True,
        enable_timestamp: bool = True,
        streams: Optional[Mapping[LogLevel, Any]] = None,
        origin: str | None = None,
    ):
        self._enable_colors = enable_colors
        self._enable_timestamp = enable_timestamp
        self._origin = origin
        self._streams: Dict[LogLevel, StreamFactory] = dict(DEFAULT_STREAMS)
        for level, stream in (streams or {}).items():
            self._streams[LogLevel.parse(level)] = stream if callable(stream) else (lambda s=stream: s)

    def stream_for(self, level: LogLevel) -> Any:
        return self._streams.get(level, DEFAULT_STREAMS[LogLevel.DEBUG])()

    def emit(self, record: LogRecord) -> None:
        self.write(record, origin=self._origin)

    def write(self, record: LogRecord, *, origin: str | None = None) -> None:
        """Format and write one record, optionally with an origin tag."""
        line = format_console_line(
            record,
            enable_colors=self._enable_colors,
            enable_timestamp=self._enable_timestamp,
            origin=origin,
        )
        stream = self.stream_for(record.level)
        stream.write(line + "\n")
        stream.flush()
