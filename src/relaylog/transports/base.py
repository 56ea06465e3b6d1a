"""
Transport abstraction (Strategy Pattern).
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional, Union

from ..types import LogLevel, LogRecord

TransportResult = Optional[Awaitable[None]]
TransportFunc = Callable[[LogLevel, str, Any, LogRecord], Union[None, Awaitable[None]]]


class Transport(ABC):
    """Abstract base class for log transports.

    ``emit`` may be a plain method or a coroutine function; the dispatcher
    awaits the result when it is awaitable.
    """

    @abstractmethod
    def emit(self, record: LogRecord) -> TransportResult:
        """Emit a log record to the transport."""
        ...

    def close(self) -> None:
        """Close the transport and release resources."""


class NullTransport(Transport):
    """Discards every record. Returned when a transport cannot be set up."""

    def emit(self, record: LogRecord) -> None:
        return None


class CallableTransport(Transport):
    """Adapts a plain ``fn(level, message, meta, record)`` function."""

    def __init__(self, func: TransportFunc):
        self._func = func

    def emit(self, record: LogRecord) -> TransportResult:
        result = self._func(record.level, record.message, record.meta, record)
        if inspect.isawaitable(result):
            return result
        return None

    def __repr__(self) -> str:
        name = getattr(self._func, "__qualname__", repr(self._func))
        return f"CallableTransport({name})"


def as_transport(candidate: Transport | TransportFunc) -> Transport:
    """Accept either a ``Transport`` or a bare callable."""
    if isinstance(candidate, Transport):
        return candidate
    if callable(candidate):
        return CallableTransport(candidate)
    raise TypeError(f"Not a transport: {candidate!r}")
