"""
Output transports: console, rotating file and inter-process forwarding.
"""

from .base import CallableTransport, NullTransport, Transport, as_transport
from .console import ConsoleTransport
from .file import FileTransport, FileTransportOptions, create_file_transport, rotate_files
from .ipc import (
    AutoIpcTransport,
    IpcChannel,
    IpcTransport,
    LocalChannel,
    MainIpcTransport,
    setup_main_ipc_handler,
)

__all__ = [
    "AutoIpcTransport",
    "CallableTransport",
    "ConsoleTransport",
    "FileTransport",
    "FileTransportOptions",
    "IpcChannel",
    "IpcTransport",
    "LocalChannel",
    "MainIpcTransport",
    "NullTransport",
    "Transport",
    "as_transport",
    "create_file_transport",
    "rotate_files",
    "setup_main_ipc_handler",
]
