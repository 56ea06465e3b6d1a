"""
Diagnostics channel for the library's own warnings and failures.

Transport failures must never be routed back through the transports that
produced them, so they go to a structlog logger instead.
"""

from __future__ import annotations

from typing import Any

import structlog

from .exceptions import TransportError


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(_name=name or "relaylog")


_logger = get_logger("relaylog.diagnostics")


def report_transport_error(transport: Any, exc: BaseException) -> TransportError:
    """Report a failed transport invocation and return the wrapped error."""
    error = TransportError(transport, exc)
    _logger.error(
        "Logging transport error",
        transport=error.details["transport"],
        error_type=error.details["error_type"],
        error=str(exc),
    )
    return error


def report_warning(event: str, **kw: Any) -> None:
    _logger.warning(event, **kw)
