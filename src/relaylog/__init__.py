"""
relaylog: structured logging with pluggable transports.

One ``Logger`` fans every accepted record out to its transports:
- console: severity-routed, optionally colored lines
- file: JSON or text lines with size-based generational rotation
- ipc: forwarding between renderer and main processes over a channel

Library: orjson for serialization, pydantic for configuration, structlog for
the library's own diagnostics.
"""

from .exceptions import ConfigurationError, RelaylogError, TransportError
from .logger import Logger, LoggerConfig
from .runtime import LoggingRuntime, create_logger, default_runtime, get_logger, log, reset_logger
from .transports import (
    AutoIpcTransport,
    CallableTransport,
    ConsoleTransport,
    FileTransport,
    FileTransportOptions,
    IpcTransport,
    LocalChannel,
    MainIpcTransport,
    NullTransport,
    Transport,
    create_file_transport,
    setup_main_ipc_handler,
)
from .types import Environment, ExecutionContext, LogLevel, LogRecord

__all__ = [
    "AutoIpcTransport",
    "CallableTransport",
    "ConfigurationError",
    "ConsoleTransport",
    "Environment",
    "ExecutionContext",
    "FileTransport",
    "FileTransportOptions",
    "IpcTransport",
    "LocalChannel",
    "LogLevel",
    "LogRecord",
    "Logger",
    "LoggerConfig",
    "LoggingRuntime",
    "MainIpcTransport",
    "NullTransport",
    "RelaylogError",
    "Transport",
    "TransportError",
    "create_file_transport",
    "create_logger",
    "get_logger",
    "log",
    "reset_logger",
    "default_runtime",
    "setup_main_ipc_handler",
]
