"""
Renderer to main forwarding over a channel.
"""

from __future__ import annotations

import io
import uuid

import pytest
from structlog.testing import capture_logs

from conftest import RecordingTransport
from relaylog import (
    AutoIpcTransport,
    ConsoleTransport,
    IpcTransport,
    LocalChannel,
    Logger,
    MainIpcTransport,
    setup_main_ipc_handler,
)
from relaylog.transports.ipc import _installed_channels, record_from_payload
from relaylog.types import Environment, ExecutionContext, LogLevel


def _channel_name() -> str:
    # Listener installation is process-wide, so every test uses its own name.
    return f"logger-{uuid.uuid4().hex}"


def _console(stream: io.StringIO) -> ConsoleTransport:
    return ConsoleTransport(
        enable_colors=False,
        enable_timestamp=False,
        streams={level: stream for level in LogLevel},
    )


class TestIpcTransport:
    """Renderer-side sender"""

    @pytest.mark.asyncio
    async def test_renderer_records_are_sent(self) -> None:
        """The payload carries the record's fields and its own timestamp"""
        bus, received = LocalChannel(), []
        bus.on("logger", received.append)
        recording = RecordingTransport()
        logger = Logger(context=ExecutionContext.RENDERER, transports=[IpcTransport(bus=bus), recording])

        await logger.warn("from renderer", {"tab": 3})

        payload = received[0]
        assert payload["level"] == int(LogLevel.WARN)
        assert payload["message"] == "from renderer"
        assert payload["meta"] == {"tab": 3}
        assert payload["context"]["context"] == "renderer"
        assert payload["timestamp"] == recording.records[0].timestamp

    @pytest.mark.asyncio
    async def test_noop_without_channel_or_outside_renderer(self) -> None:
        """Nothing is sent without a bus or from a non-renderer record"""
        bus, received = LocalChannel(), []
        bus.on("logger", received.append)

        await Logger(context=ExecutionContext.RENDERER, transports=[IpcTransport(bus=None)]).info("a")
        await Logger(context=ExecutionContext.MAIN, transports=[IpcTransport(bus=bus)]).info("b")

        assert received == []

    @pytest.mark.asyncio
    async def test_send_failure_is_reported(self) -> None:
        """A channel that raises is reported on diagnostics"""

        class BrokenBus(LocalChannel):
            def send(self, channel, payload):
                raise ConnectionError("channel closed")

        logger = Logger(context=ExecutionContext.RENDERER, transports=[IpcTransport(bus=BrokenBus())])

        with capture_logs() as logs:
            await logger.error("lost")

        assert logs[0]["error_type"] == "ConnectionError"


class TestMainIpcTransport:
    """Main-side local printer"""

    @pytest.mark.asyncio
    async def test_prints_with_ipc_tag_in_main(self) -> None:
        """Only main records are printed, tagged [IPC]"""
        out = io.StringIO()
        transport = MainIpcTransport(console=_console(out))

        await Logger(context=ExecutionContext.MAIN, transports=[transport]).info("hello")
        await Logger(context=ExecutionContext.NODE, transports=[transport]).info("ignored")

        assert out.getvalue() == "[INFO] [IPC] hello\n"


class TestAutoIpcTransport:
    """Context-dependent behaviour"""

    @pytest.mark.asyncio
    async def test_renderer_forwards_with_source(self) -> None:
        """Renderer records are sent with source=renderer"""
        bus, received = LocalChannel(), []
        bus.on("logger", received.append)
        logger = Logger(context=ExecutionContext.RENDERER, transports=[AutoIpcTransport(bus=bus)])

        await logger.info("click")

        assert received[0]["source"] == "renderer"
        assert received[0]["message"] == "click"

    @pytest.mark.asyncio
    async def test_main_prints_locally(self) -> None:
        """Main records are printed with a [MAIN] tag"""
        out = io.StringIO()
        logger = Logger(context=ExecutionContext.MAIN, transports=[AutoIpcTransport(console=_console(out))])

        await logger.error("crash", {"code": 1})

        assert out.getvalue() == '[ERROR] [MAIN] crash {"code":1}\n'

    @pytest.mark.asyncio
    async def test_node_context_is_ignored(self) -> None:
        """Plain process records go nowhere"""
        out = io.StringIO()
        logger = Logger(context=ExecutionContext.NODE, transports=[AutoIpcTransport(console=_console(out))])

        await logger.error("nothing")

        assert out.getvalue() == ""


class TestMainIpcHandler:
    """Main-process listener"""

    @pytest.mark.asyncio
    async def test_renderer_to_main_roundtrip(self) -> None:
        """A renderer record comes out of the main console tagged [RENDERER]"""
        name, bus, out = _channel_name(), LocalChannel(), io.StringIO()
        assert setup_main_ipc_handler(bus, name, console=_console(out)) is True

        renderer = Logger(context=ExecutionContext.RENDERER, transports=[AutoIpcTransport(name, bus=bus)])
        await renderer.warn("slow frame", {"ms": 40})

        assert out.getvalue() == '[WARN] [RENDERER] slow frame {"ms":40}\n'

    def test_string_context_tag_is_accepted(self) -> None:
        """A payload whose context is a bare tag is printed like any other"""
        name, bus, out = _channel_name(), LocalChannel(), io.StringIO()
        setup_main_ipc_handler(bus, name, console=_console(out))

        with capture_logs() as logs:
            bus.send(name, {"level": 1, "message": "hi", "context": "renderer", "timestamp": "t"})

        assert out.getvalue() == "[WARN] [RENDERER] hi\n"
        assert [entry["event"] for entry in logs] == []

    def test_installed_once_per_channel(self) -> None:
        """A second install on the same name is refused"""
        name, bus = _channel_name(), LocalChannel()

        assert setup_main_ipc_handler(bus, name) is True
        assert setup_main_ipc_handler(bus, name) is False
        assert setup_main_ipc_handler(LocalChannel(), name) is False

    def test_only_in_main_context(self) -> None:
        """Other contexts never install a listener"""
        assert setup_main_ipc_handler(LocalChannel(), _channel_name(), context=ExecutionContext.RENDERER) is False

    def test_listener_registration_failure_is_reported(self) -> None:
        """A bus whose on() raises is reported and the name stays free"""

        class ClosedBus(LocalChannel):
            def on(self, channel, handler):
                raise RuntimeError("bus closed")

        name = _channel_name()
        with capture_logs() as logs:
            assert setup_main_ipc_handler(ClosedBus(), name) is False

        assert logs[0]["event"] == "Failed to setup IPC handler"
        assert logs[0]["log_level"] == "error"
        assert name not in _installed_channels
        assert setup_main_ipc_handler(LocalChannel(), name) is True

    def test_bad_payload_is_reported(self) -> None:
        """A payload that is not a mapping is reported by the handler"""
        name, bus = _channel_name(), LocalChannel()
        setup_main_ipc_handler(bus, name, console=_console(io.StringIO()))

        with capture_logs() as logs:
            bus.send(name, "garbage")

        assert logs[0]["event"] == "Failed to handle IPC log record"


class TestRecordFromPayload:
    """Decoding received payloads"""

    def test_sparse_payload(self) -> None:
        """Missing fields take their defaults"""
        record = record_from_payload({"message": "m"})

        assert record.level is LogLevel.INFO
        assert record.context is ExecutionContext.RENDERER
        assert record.meta is None
        assert record.timestamp

    def test_unknown_values_fall_back(self) -> None:
        """Unknown level, context and environment use INFO, RENDERER, DEVELOPMENT"""
        record = record_from_payload(
            {
                "level": "deafening",
                "message": "?",
                "context": {"context": "gpu", "environment": "staging"},
            }
        )

        assert record.level is LogLevel.INFO
        assert record.context is ExecutionContext.RENDERER
        assert record.environment is Environment.DEVELOPMENT

    def test_mapping_context_keeps_process_info(self) -> None:
        """The record mapping form carries environment and ids through"""
        record = record_from_payload(
            {
                "level": 0,
                "message": "boom",
                "timestamp": "2024-01-01T00:00:00.000Z",
                "context": {"context": "main", "environment": "production", "process_id": 7, "thread_id": 9},
            }
        )

        assert record.level is LogLevel.ERROR
        assert record.context is ExecutionContext.MAIN
        assert record.environment is Environment.PRODUCTION
        assert (record.process_id, record.thread_id) == (7, 9)
        assert record.timestamp == "2024-01-01T00:00:00.000Z"
