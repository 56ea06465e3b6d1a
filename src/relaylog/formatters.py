"""
Log formatters and color utilities.
"""

from __future__ import annotations

from typing import Any

import orjson

from .types import FileFormat, LogLevel, LogRecord

# =============================================================================
# ANSI Color Codes
# =============================================================================

COLORS = {
    "reset": "\033[0m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "magenta": "\033[35m",
    "cyan": "\033[36m",
    "white": "\033[37m",
}

LEVEL_COLORS = {
    LogLevel.ERROR: "red",
    LogLevel.WARN: "yellow",
    LogLevel.INFO: "green",
    LogLevel.DEBUG: "blue",
    LogLevel.TRACE: "cyan",
}


def colorize(text: str, color: str) -> str:
    """Apply ANSI color to text. Unknown colors only append the reset code."""
    return f"{COLORS.get(color, '')}{text}{COLORS['reset']}"


# =============================================================================
# JSON Serialization
# =============================================================================


def orjson_dumps(v: Any, *, default: Any = str) -> str:
    """Fast JSON serialization using orjson."""
    return orjson.dumps(v, default=default, option=orjson.OPT_UTC_Z | orjson.OPT_NAIVE_UTC | orjson.OPT_NON_STR_KEYS).decode()


# =============================================================================
# Line Formats
# =============================================================================


def format_console_line(
    record: LogRecord,
    *,
    enable_colors: bool = True,
    enable_timestamp: bool = True,
    origin: str | None = None,
) -> str:
    """Render ``[timestamp] [LEVEL] [ORIGIN] message meta`` for terminals."""
    parts = []
    if enable_timestamp:
        parts.append(f"[{record.timestamp}]")
    parts.append(f"[{record.level_name}]")
    if origin:
        parts.append(f"[{origin}]")
    prefix = " ".join(parts)

    if enable_colors:
        prefix = colorize(prefix, LEVEL_COLORS.get(record.level, ""))

    line = f"{prefix} {record.message}"
    if record.meta is not None:
        line = f"{line} {orjson_dumps(record.meta)}"
    return line


def format_record(record: LogRecord, fmt: FileFormat = "json") -> str:
    """Render one newline-terminated line for a file sink."""
    if fmt == "json":
        return orjson_dumps(record.to_dict()) + "\n"

    meta_str = f" {orjson_dumps(record.meta)}" if record.meta else ""
    return f"[{record.timestamp}] [{record.level_name}] {record.message}{meta_str}\n"


def format_file_size(size: int) -> str:
    """Human-readable byte size, e.g. ``10 MB`` or ``1.5 KB``."""
    if size <= 0:
        return "0 B"

    units = ["B", "KB", "MB", "GB"]
    exponent = 0
    while size >= 1024 ** (exponent + 1) and exponent < len(units) - 1:
        exponent += 1
    value = round(size / 1024**exponent, 2)
    return f"{value:g} {units[exponent]}"
