"""
File transport with size-triggered generational rotation.

Layout on disk for ``file_path=app.log`` and ``max_files=N``::

    app.log        active file, appended to
    app.log.1      previous generation
    ...
    app.log.{N-1}  oldest generation kept

Each write stats the active file, rotates if it is larger than ``max_size``
and then appends one formatted line. Rotation walks the generations from the
highest index down so that no file is overwritten before it has been moved.
"""

from __future__ import annotations

import asyncio
import threading
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..diagnostics import get_logger, report_transport_error, report_warning
from ..formatters import format_file_size, format_record
from ..types import FileFormat, LogRecord
from .base import NullTransport, Transport

logger = get_logger("relaylog.transports.file")

DEFAULT_MAX_SIZE = 10 * 1024 * 1024
DEFAULT_MAX_FILES = 5


class FileTransportOptions(BaseModel):
    """Options for ``FileTransport``."""

    model_config = ConfigDict(frozen=True)

    file_path: Path
    max_size: int = Field(default=DEFAULT_MAX_SIZE, ge=0, description="Rotate once the file exceeds this many bytes")
    max_files: int = Field(default=DEFAULT_MAX_FILES, ge=1, description="Generations kept, active file included")
    format: FileFormat = "json"
    encoding: str = "utf-8"


def generation_path(path: Path, index: int) -> Path:
    """``app.log`` for index 0, ``app.log.{index}`` otherwise."""
    if index == 0:
        return path
    return path.with_name(f"{path.name}.{index}")


def rotate_files(path: str | Path, max_files: int) -> bool:
    """Shift every generation up by one and drop the oldest.

    After a successful rotation ``path`` no longer exists. Returns False if a
    rename or delete failed; the chain is then left as far as it got and the
    next write retries.
    """
    path = Path(path)
    try:
        for i in range(max_files - 1, -1, -1):
            src = generation_path(path, i)
            if not src.exists():
                continue
            if i == max_files - 1:
                src.unlink()
            else:
                src.replace(generation_path(path, i + 1))
    except OSError as exc:
        logger.error("Log rotation error", path=str(path), error=str(exc))
        return False
    return True


class FileTransport(Transport):
    """Appends formatted records to a file, rotating by size.

    Construction creates the parent directory and raises ``OSError`` if that
    fails; use ``create_file_transport`` for the fail-soft variant.
    """

    def __init__(self, options: FileTransportOptions | None = None, **kwargs: Any):
        self.options = options or FileTransportOptions(**kwargs)
        self.path = self.options.file_path
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Serialises check-rotate-append across OS threads.
        self._lock = threading.Lock()

    async def emit(self, record: LogRecord) -> None:
        await asyncio.to_thread(self._write, record)

    def _write(self, record: LogRecord) -> None:
        """Check, rotate and append under the lock. Errors are reported."""
        with self._lock:
            try:
                self._check_and_rotate()
                line = format_record(record, self.options.format)
                with open(self.path, "a", encoding=self.options.encoding) as fh:
                    fh.write(line)
            except Exception as exc:
                report_transport_error(self, exc)

    def _check_and_rotate(self) -> None:
        try:
            size = self.path.stat().st_size
        except FileNotFoundError:
            return
        if size > self.options.max_size:
            logger.info(
                "Rotating log file",
                path=str(self.path),
                size=format_file_size(size),
                max_files=self.options.max_files,
            )
            rotate_files(self.path, self.options.max_files)

    def __repr__(self) -> str:
        return f"FileTransport({str(self.path)!r})"


def create_file_transport(
    options: FileTransportOptions | None = None,
    *,
    storage_available: bool = True,
    **kwargs: Any,
) -> Transport:
    """Build a ``FileTransport``, degrading to ``NullTransport`` on failure."""
    if not storage_available:
        report_warning("File transport is not supported in this execution context")
        return NullTransport()

    options = options or FileTransportOptions(**kwargs)
    try:
        return FileTransport(options)
    except OSError as exc:
        report_warning("Failed to create log directory", path=str(options.file_path.parent), error=str(exc))
        return NullTransport()
