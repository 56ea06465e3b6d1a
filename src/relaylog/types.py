"""
Core value types shared by the dispatcher and every transport.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Dict, Literal, Optional

FileFormat = Literal["json", "text"]


class LogLevel(IntEnum):
    """Severity levels. Lower value means more severe."""

    ERROR = 0
    WARN = 1
    INFO = 2
    DEBUG = 3
    TRACE = 4

    @classmethod
    def parse(cls, value: "LogLevel | int | str") -> "LogLevel":
        """Coerce an int, a member or a case-insensitive name into a level."""
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid log level: {value!r}")
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, str):
            name = value.strip().upper()
            if name == "WARNING":
                name = "WARN"
            if name in cls.__members__:
                return cls[name]
            if name.isdigit():
                return cls(int(name))
        raise ValueError(f"Invalid log level: {value!r}")


class ExecutionContext(str, Enum):
    """Logical process role that produced a record."""

    MAIN = "main"
    RENDERER = "renderer"
    NODE = "node"


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"


@dataclass(frozen=True)
class LogRecord:
    """One accepted log event.

    Built once per accepted call and handed, by identity, to every transport.
    Transports only read it.
    """

    timestamp: str
    level: LogLevel
    level_name: str
    message: str
    meta: Any
    context: ExecutionContext
    environment: Environment
    process_id: Optional[int] = None
    thread_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire form: enums flattened to their plain values."""
        return {
            "timestamp": self.timestamp,
            "level": int(self.level),
            "level_name": self.level_name,
            "message": self.message,
            "meta": self.meta,
            "context": self.context.value,
            "environment": self.environment.value,
            "process_id": self.process_id,
            "thread_id": self.thread_id,
        }
