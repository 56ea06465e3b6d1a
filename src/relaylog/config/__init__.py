"""
relaylog Configuration Module.

Each sub-settings class loads from its own environment variable prefix:

    RELAYLOG_ENV / RELAYLOG_IS_DEV / RELAYLOG_IS_PROD  -> EnvironmentSettings
    RELAYLOG_LOG_*                                     -> LoggingSettings

Usage:
    from relaylog.config import Settings

    settings = Settings()
    settings.environment.resolve()  # Environment.DEVELOPMENT
    settings.logging.file_path
"""

from functools import cached_property

from .environment import EnvironmentSettings
from .logging import LoggingSettings


class Settings:
    """Composite settings aggregating the configuration domains."""

    @cached_property
    def environment(self) -> EnvironmentSettings:
        return EnvironmentSettings()

    @cached_property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


__all__ = [
    "EnvironmentSettings",
    "LoggingSettings",
    "Settings",
]
