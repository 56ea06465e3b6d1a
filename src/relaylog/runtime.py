"""
Process-wide logger handle.

The host creates the shared logger once at startup (or lets the first
``get`` create it) and tests call ``reset`` between cases. Environment and
execution context are resolved here from settings, so the ``Logger`` itself
only ever sees plain values.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, List, Optional

from .config import Settings
from .diagnostics import get_logger as get_diagnostics_logger
from .logger import Logger
from .transports.base import Transport
from .transports.console import ConsoleTransport
from .transports.file import FileTransportOptions, create_file_transport
from .types import Environment, ExecutionContext

logger = get_diagnostics_logger("relaylog.runtime")


class LoggingRuntime:
    """Owns the shared ``Logger`` for one process."""

    def __init__(self, settings: Optional[Settings] = None):
        self._given_settings = settings
        self._settings = settings
        self._logger: Optional[Logger] = None
        self._lock = threading.Lock()

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = Settings()
        return self._settings

    def create(self, **partial: Any) -> Logger:
        """Build a new, unshared logger from settings plus ``partial`` overrides."""
        log_settings = self.settings.logging

        values: dict[str, Any] = {
            "level": log_settings.level,
            "context": log_settings.context,
            "environment": self.settings.environment.resolve(),
            "enable_console_colors": log_settings.console_colors,
            "max_log_file_size": log_settings.max_file_size,
            "max_log_files": log_settings.max_files,
        }
        values.update({k: v for k, v in partial.items() if v is not None})

        if "transports" not in values and log_settings.file_path:
            values["transports"] = self._default_transports(values)

        return Logger(**values)

    def _default_transports(self, values: dict[str, Any]) -> List[Transport]:
        environment = Environment(values["environment"])
        context = ExecutionContext(values["context"])
        colors = values.get("enable_console_colors")
        if colors is None:
            colors = environment is Environment.DEVELOPMENT

        options = FileTransportOptions(
            file_path=Path(self.settings.logging.file_path),
            max_size=values["max_log_file_size"],
            max_files=values["max_log_files"],
            format=self.settings.logging.file_format,
        )
        return [
            ConsoleTransport(enable_colors=colors, enable_timestamp=values.get("enable_timestamp", True)),
            create_file_transport(options, storage_available=context is not ExecutionContext.RENDERER),
        ]

    def get(self, **partial: Any) -> Logger:
        """Return the shared logger, creating it on first use.

        ``partial`` only applies to that first creation.
        """
        with self._lock:
            if self._logger is None:
                self._logger = self.create(**partial)
                logger.debug("Shared logger created", logger=repr(self._logger))
            return self._logger

    def reset(self) -> None:
        """Close and drop the shared logger and re-read settings on next use."""
        with self._lock:
            current, self._logger = self._logger, None
            self._settings = self._given_settings
        if current is not None:
            current.close()


default_runtime = LoggingRuntime()


def create_logger(**partial: Any) -> Logger:
    return default_runtime.create(**partial)


def get_logger(**partial: Any) -> Logger:
    return default_runtime.get(**partial)


def reset_logger() -> None:
    default_runtime.reset()


class _SharedLogShortcuts:
    """Severity shortcuts that always go through the current shared logger.

    The logger is looked up on every call, so ``reset_logger`` takes effect
    immediately.
    """

    def __init__(self, runtime: LoggingRuntime):
        self._runtime = runtime

    async def error(self, message: str, meta: Any = None) -> None:
        await self._runtime.get().error(message, meta)

    async def warn(self, message: str, meta: Any = None) -> None:
        await self._runtime.get().warn(message, meta)

    async def info(self, message: str, meta: Any = None) -> None:
        await self._runtime.get().info(message, meta)

    async def debug(self, message: str, meta: Any = None) -> None:
        await self._runtime.get().debug(message, meta)

    async def trace(self, message: str, meta: Any = None) -> None:
        await self._runtime.get().trace(message, meta)


log = _SharedLogShortcuts(default_runtime)
