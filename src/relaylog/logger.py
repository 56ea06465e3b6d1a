"""
Logger: level filtering and fan-out of one record to every transport.
"""

from __future__ import annotations

import asyncio
import inspect
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .diagnostics import report_transport_error, report_warning
from .exceptions import ConfigurationError
from .process import get_process_info
from .transports.base import Transport, TransportFunc, as_transport
from .transports.console import ConsoleTransport
from .transports.file import DEFAULT_MAX_FILES, DEFAULT_MAX_SIZE
from .types import Environment, ExecutionContext, LogLevel, LogRecord


def _parse_level(value: Any) -> LogLevel:
    try:
        return LogLevel.parse(value)
    except ValueError as exc:
        raise ConfigurationError(str(exc), details={"level": repr(value)}) from exc


class LoggerConfig(BaseModel):
    """Mutable configuration owned by exactly one ``Logger``.

    ``max_log_file_size`` and ``max_log_files`` are defaults for file
    transports built from this config; the dispatcher does not enforce them.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True, extra="forbid")

    level: LogLevel = LogLevel.DEBUG
    transports: List[Transport] = Field(default_factory=list)
    context: ExecutionContext = ExecutionContext.NODE
    environment: Environment = Environment.DEVELOPMENT
    enable_console_colors: bool = True
    enable_timestamp: bool = True
    enable_process_info: bool = True
    max_log_file_size: int = Field(default=DEFAULT_MAX_SIZE, ge=0)
    max_log_files: int = Field(default=DEFAULT_MAX_FILES, ge=1)
    transport_timeout: Optional[float] = Field(default=None, gt=0, description="Per-transport wait bound in seconds")

    @field_validator("level", mode="before")
    @classmethod
    def validate_level(cls, v: Any) -> LogLevel:
        return LogLevel.parse(v)

    @field_validator("transports", mode="before")
    @classmethod
    def validate_transports(cls, v: Any) -> List[Transport]:
        return [as_transport(t) for t in v]

    @classmethod
    def with_defaults(cls, **partial: Any) -> "LoggerConfig":
        """Merge caller-supplied fields over environment-derived defaults.

        ``None`` values count as "not supplied".
        """
        supplied = {k: v for k, v in partial.items() if v is not None}
        environment = Environment(supplied.get("environment", Environment.DEVELOPMENT))
        production = environment is Environment.PRODUCTION
        defaults: Dict[str, Any] = {
            "level": LogLevel.WARN if production else LogLevel.DEBUG,
            "environment": environment,
            "enable_console_colors": not production,
        }
        return cls(**{**defaults, **supplied})


class Logger:
    """Dispatches log calls to a list of transports.

    Each accepted call builds one ``LogRecord`` and hands that same object to
    every transport. Transports run concurrently; a failure in one is
    reported to the diagnostics channel and never reaches the caller or the
    other transports. The call completes once every transport has settled.

    There is no timeout unless ``transport_timeout`` is configured, so a
    transport that never finishes stalls the call that invoked it.

    Concurrent, unawaited calls may interleave inside a transport. For the
    file transport this means two writes can both see the file under the
    size limit and both append before the next write rotates.
    """

    def __init__(self, config: LoggerConfig | Mapping[str, Any] | None = None, **partial: Any):
        try:
            if isinstance(config, LoggerConfig):
                values = _config_values(config)
                values.update(partial)
                resolved = LoggerConfig(**values)
            else:
                resolved = LoggerConfig.with_defaults(**{**dict(config or {}), **partial})
        except (ValidationError, ValueError, TypeError) as exc:
            raise ConfigurationError(f"Invalid logger configuration: {exc}") from exc

        if not resolved.transports:
            resolved.transports.append(
                ConsoleTransport(
                    enable_colors=resolved.enable_console_colors,
                    enable_timestamp=resolved.enable_timestamp,
                )
            )
        self._init_state(resolved, None)

    def _init_state(self, config: LoggerConfig, base_meta: Optional[Dict[str, Any]]) -> None:
        self._config = config
        self._base_meta = base_meta
        # Guards the transport list; dispatch iterates over a snapshot.
        self._lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    async def log(self, level: LogLevel | int | str, message: str, meta: Any = None) -> None:
        try:
            level = LogLevel.parse(level)
        except ValueError:
            report_warning("Dropping log call with invalid level", level=repr(level), message=message)
            return

        if not self.is_level_enabled(level):
            return

        record = self._build_record(level, message, self._merge_meta(meta))
        transports = self._snapshot()
        if not transports:
            return

        timeout = self._config.transport_timeout
        await asyncio.gather(*(self._invoke(t, record, timeout) for t in transports))

    @staticmethod
    async def _invoke(transport: Transport, record: LogRecord, timeout: Optional[float]) -> None:
        try:
            result = transport.emit(record)
            if inspect.isawaitable(result):
                if timeout is None:
                    await result
                else:
                    await asyncio.wait_for(result, timeout)
        except Exception as exc:
            report_transport_error(transport, exc)

    def _build_record(self, level: LogLevel, message: str, meta: Any) -> LogRecord:
        process_id, thread_id = get_process_info() if self._config.enable_process_info else (None, None)
        return LogRecord(
            timestamp=_utc_timestamp(),
            level=level,
            level_name=level.name,
            message=message,
            meta=meta,
            context=self._config.context,
            environment=self._config.environment,
            process_id=process_id,
            thread_id=thread_id,
        )

    def _merge_meta(self, meta: Any) -> Any:
        if self._base_meta is None:
            return meta
        if meta is None:
            return dict(self._base_meta)
        if isinstance(meta, Mapping):
            return {**self._base_meta, **meta}
        return meta

    def _snapshot(self) -> List[Transport]:
        with self._lock:
            return list(self._config.transports)

    async def error(self, message: str, meta: Any = None) -> None:
        await self.log(LogLevel.ERROR, message, meta)

    async def warn(self, message: str, meta: Any = None) -> None:
        await self.log(LogLevel.WARN, message, meta)

    warning = warn

    async def info(self, message: str, meta: Any = None) -> None:
        await self.log(LogLevel.INFO, message, meta)

    async def debug(self, message: str, meta: Any = None) -> None:
        await self.log(LogLevel.DEBUG, message, meta)

    async def trace(self, message: str, meta: Any = None) -> None:
        await self.log(LogLevel.TRACE, message, meta)

    # -------------------------------------------------------------------------
    # Transport management
    # -------------------------------------------------------------------------

    def add_transport(self, transport: Transport | TransportFunc) -> None:
        transport = as_transport(transport)
        with self._lock:
            self._config.transports.append(transport)

    def remove_transport(self, index: int) -> None:
        """Remove the transport at ``index``; out-of-range indexes are ignored."""
        with self._lock:
            if 0 <= index < len(self._config.transports):
                del self._config.transports[index]

    def clear_transports(self) -> None:
        with self._lock:
            self._config.transports = []

    def close(self) -> None:
        """Close every transport. Failures are reported, not raised."""
        for transport in self._snapshot():
            try:
                transport.close()
            except Exception as exc:
                report_transport_error(transport, exc)

    # -------------------------------------------------------------------------
    # Level control & introspection
    # -------------------------------------------------------------------------

    def set_level(self, level: LogLevel | int | str) -> None:
        self._config.level = _parse_level(level)

    def get_level(self) -> LogLevel:
        return self._config.level

    def is_level_enabled(self, level: LogLevel | int | str) -> bool:
        return _parse_level(level) <= self._config.level

    def get_config(self) -> LoggerConfig:
        """Return a detached copy; changing it does not affect this logger."""
        with self._lock:
            return LoggerConfig(**_config_values(self._config))

    def child(self, meta: Mapping[str, Any]) -> "Logger":
        """Create a logger that merges ``meta`` under every call's meta.

        The child gets its own copy of the configuration and transport list;
        the transport instances themselves are shared. Keys passed at the call
        site win over ``meta``.
        """
        base = {**(self._base_meta or {}), **dict(meta)}
        child = Logger.__new__(Logger)
        child._init_state(self.get_config(), base)
        return child

    def __repr__(self) -> str:
        return (
            f"Logger(level={self._config.level.name}, context={self._config.context.value}, "
            f"transports={len(self._config.transports)})"
        )


def _config_values(config: LoggerConfig) -> Dict[str, Any]:
    values = {name: getattr(config, name) for name in LoggerConfig.model_fields}
    values["transports"] = list(config.transports)
    return values


def _utc_timestamp() -> str:
    """ISO-8601 with milliseconds and a ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
