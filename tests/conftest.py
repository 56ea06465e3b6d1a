from __future__ import annotations

import asyncio
from typing import Any, List, Tuple

import pytest

from relaylog import reset_logger
from relaylog.transports.base import Transport
from relaylog.types import LogRecord


class RecordingTransport(Transport):
    """Counts invocations and keeps every record it was handed."""

    def __init__(self, name: str = "recording"):
        self.name = name
        self.records: List[LogRecord] = []
        self.closed = False

    @property
    def calls(self) -> int:
        return len(self.records)

    def emit(self, record: LogRecord) -> None:
        self.records.append(record)

    def close(self) -> None:
        self.closed = True


class AsyncRecordingTransport(RecordingTransport):
    def __init__(self, name: str = "async", delay: float = 0.0):
        super().__init__(name)
        self.delay = delay

    async def emit(self, record: LogRecord) -> None:
        await asyncio.sleep(self.delay)
        self.records.append(record)


class FailingTransport(Transport):
    def __init__(self, exc: Exception | None = None):
        self.exc = exc or RuntimeError("transport exploded")
        self.calls = 0

    def emit(self, record: LogRecord) -> None:
        self.calls += 1
        raise self.exc


class AsyncFailingTransport(FailingTransport):
    async def emit(self, record: LogRecord) -> None:
        self.calls += 1
        await asyncio.sleep(0)
        raise self.exc


@pytest.fixture
def recording() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture(autouse=True)
def reset_shared_logger():
    """Drops the process-wide logger around every test."""
    reset_logger()
    yield
    reset_logger()


@pytest.fixture(autouse=True)
def clean_relaylog_env(monkeypatch):
    for name in (
        "RELAYLOG_ENV",
        "RELAYLOG_IS_DEV",
        "RELAYLOG_IS_PROD",
        "RELAYLOG_LOG_LEVEL",
        "RELAYLOG_LOG_CONTEXT",
        "RELAYLOG_LOG_CONSOLE_COLORS",
        "RELAYLOG_LOG_FILE_PATH",
        "RELAYLOG_LOG_FILE_FORMAT",
        "RELAYLOG_LOG_MAX_FILE_SIZE",
        "RELAYLOG_LOG_MAX_FILES",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


def tuples(transport: RecordingTransport) -> List[Tuple[Any, ...]]:
    return [(r.level, r.message, r.meta) for r in transport.records]
