"""
Environment Configuration.

Resolves the application environment from ``RELAYLOG_ENV`` and the two
boolean overrides ``RELAYLOG_IS_DEV`` / ``RELAYLOG_IS_PROD``. The logger core
never reads these itself; it receives the resolved ``Environment``.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..types import Environment


class EnvironmentSettings(BaseSettings):
    """Environment detection.

    Resolution order:
    1. ``RELAYLOG_ENV``: ``production`` means production, any other value development
    2. ``RELAYLOG_IS_DEV`` set and true
    3. ``RELAYLOG_IS_PROD`` set and true
    4. development
    """

    model_config = SettingsConfigDict(
        env_prefix="RELAYLOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: Optional[str] = Field(default=None, description="Application environment name")
    is_dev: bool = Field(default=False, description="Force development mode")
    is_prod: bool = Field(default=False, description="Force production mode")

    def resolve(self) -> Environment:
        if self.env:
            return Environment.PRODUCTION if self.env.strip().lower() == "production" else Environment.DEVELOPMENT
        if self.is_dev:
            return Environment.DEVELOPMENT
        if self.is_prod:
            return Environment.PRODUCTION
        return Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        return self.resolve() is Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        return self.resolve() is Environment.DEVELOPMENT
