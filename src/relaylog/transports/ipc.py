"""
Inter-process transports.

The channel itself is opaque: anything with ``send(channel, payload)`` and
``on(channel, handler)`` works. ``LocalChannel`` is an in-process stand-in.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Set

from ..diagnostics import get_logger, report_transport_error
from ..types import Environment, ExecutionContext, LogLevel, LogRecord
from .base import Transport
from .console import ConsoleTransport

logger = get_logger("relaylog.transports.ipc")

DEFAULT_CHANNEL = "logger"

Handler = Callable[[Dict[str, Any]], None]


class IpcChannel(Protocol):
    def send(self, channel: str, payload: Dict[str, Any]) -> None: ...

    def on(self, channel: str, handler: Handler) -> None: ...


class LocalChannel:
    """Synchronous in-process channel. Handlers run in the sender's thread."""

    def __init__(self) -> None:
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)

    def send(self, channel: str, payload: Dict[str, Any]) -> None:
        for handler in list(self._handlers.get(channel, ())):
            handler(payload)

    def on(self, channel: str, handler: Handler) -> None:
        self._handlers[channel].append(handler)


def build_payload(record: LogRecord, source: str | None = None) -> Dict[str, Any]:
    """Serializable message sent over the channel."""
    payload: Dict[str, Any] = {
        "level": int(record.level),
        "message": record.message,
        "meta": record.meta,
        "context": record.to_dict(),
        "timestamp": record.timestamp,
    }
    if source:
        payload["source"] = source
    return payload


def _parse_level(value: Any) -> LogLevel:
    try:
        return LogLevel.parse(value)
    except (TypeError, ValueError):
        return LogLevel.INFO


def _parse_context(value: Any) -> ExecutionContext:
    try:
        return ExecutionContext(value)
    except ValueError:
        return ExecutionContext.RENDERER


def _parse_environment(value: Any) -> Environment:
    try:
        return Environment(value)
    except ValueError:
        return Environment.DEVELOPMENT


def record_from_payload(payload: Mapping[str, Any]) -> LogRecord:
    """Rebuild a record from a received payload, tolerating missing fields.

    ``context`` is either the full record mapping produced by
    ``build_payload`` or a bare context tag such as ``"renderer"``. Unknown
    levels, contexts and environments fall back to INFO, RENDERER and
    DEVELOPMENT.
    """
    level = _parse_level(payload.get("level", LogLevel.INFO))
    raw_context = payload.get("context")
    if isinstance(raw_context, Mapping):
        details: Mapping[str, Any] = raw_context
        context_tag = raw_context.get("context")
    else:
        details = {}
        context_tag = raw_context
    return LogRecord(
        timestamp=payload.get("timestamp") or details.get("timestamp") or _utc_now(),
        level=level,
        level_name=level.name,
        message=str(payload.get("message", "")),
        meta=payload.get("meta"),
        context=_parse_context(context_tag),
        environment=_parse_environment(details.get("environment")),
        process_id=details.get("process_id"),
        thread_id=details.get("thread_id"),
    )


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class IpcTransport(Transport):
    """Forwards renderer records to the main process over ``bus``.

    Does nothing when no channel is available or the record was not produced
    in the renderer.
    """

    def __init__(self, channel_name: str = DEFAULT_CHANNEL, bus: Optional[IpcChannel] = None):
        self.channel_name = channel_name
        self._bus = bus

    def emit(self, record: LogRecord) -> None:
        if self._bus is None or record.context is not ExecutionContext.RENDERER:
            return
        try:
            self._bus.send(self.channel_name, build_payload(record))
        except Exception as exc:
            report_transport_error(self, exc)


class MainIpcTransport(Transport):
    """Main-process side: prints ``[IPC]``-tagged lines through the console path."""

    def __init__(self, console: Optional[ConsoleTransport] = None):
        self._console = console or ConsoleTransport(enable_colors=False)

    def emit(self, record: LogRecord) -> None:
        if record.context is not ExecutionContext.MAIN:
            return
        self._console.write(record, origin="IPC")


class AutoIpcTransport(Transport):
    """Picks its behaviour from the record's execution context.

    Renderer records are sent to the main process; main records are printed
    locally with a ``[MAIN]`` tag; plain process records are ignored.
    """

    def __init__(
        self,
        channel_name: str = DEFAULT_CHANNEL,
        bus: Optional[IpcChannel] = None,
        console: Optional[ConsoleTransport] = None,
    ):
        self.channel_name = channel_name
        self._bus = bus
        self._console = console or ConsoleTransport(enable_colors=False)

    def emit(self, record: LogRecord) -> None:
        if record.context is ExecutionContext.RENDERER:
            if self._bus is None:
                return
            try:
                self._bus.send(self.channel_name, build_payload(record, source="renderer"))
            except Exception as exc:
                report_transport_error(self, exc)
        elif record.context is ExecutionContext.MAIN:
            self._console.write(record, origin="MAIN")


# Channel names with an installed listener. Process-wide, never cleared.
_installed_channels: Set[str] = set()
_install_lock = threading.Lock()


def setup_main_ipc_handler(
    bus: IpcChannel,
    channel_name: str = DEFAULT_CHANNEL,
    *,
    context: ExecutionContext = ExecutionContext.MAIN,
    console: Optional[ConsoleTransport] = None,
) -> bool:
    """Install the main-process listener that prints renderer records.

    Only valid in the main process, and only once per channel name.
    Returns True if a listener was installed by this call.
    """
    if context is not ExecutionContext.MAIN:
        return False

    with _install_lock:
        if channel_name in _installed_channels:
            return False
        out = console or ConsoleTransport(enable_colors=False)

        def handle(payload: Dict[str, Any]) -> None:
            try:
                out.write(record_from_payload(payload), origin="RENDERER")
            except Exception as exc:
                logger.error("Failed to handle IPC log record", channel=channel_name, error=str(exc))

        try:
            bus.on(channel_name, handle)
        except Exception as exc:
            logger.error("Failed to setup IPC handler", channel=channel_name, error=str(exc))
            return False
        _installed_channels.add(channel_name)

    logger.info("IPC handler set up", channel=channel_name)
    return True
