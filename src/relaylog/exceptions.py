"""
Exception hierarchy for relaylog.

Nothing in here is ever raised out of ``Logger.log`` or a transport factory.
Configuration errors surface at setup time; transport errors are wrapped and
reported to the diagnostics channel.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class RelaylogError(Exception):
    """Root of all relaylog errors."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(RelaylogError, ValueError):
    """Invalid logger or transport configuration."""


class TransportError(RelaylogError):
    """A transport failed while handling a record."""

    def __init__(self, transport: Any, original: BaseException) -> None:
        name = type(transport).__name__
        super().__init__(
            f"Transport {name} failed: {original!r}",
            details={"transport": name, "error_type": type(original).__name__},
        )
        self.transport = transport
        self.original = original
