"""
Logging Configuration.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..types import ExecutionContext, FileFormat


class LoggingSettings(BaseSettings):
    """Defaults for loggers created through the runtime handle."""

    model_config = SettingsConfigDict(
        env_prefix="RELAYLOG_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    level: Optional[str] = Field(default=None, description="Minimum level (error, warn, info, debug, trace)")
    context: ExecutionContext = Field(default=ExecutionContext.NODE, description="Execution context of this process")
    console_colors: Optional[bool] = Field(default=None, description="Override console colors")
    file_path: Optional[str] = Field(default=None, description="Enables a file transport when set")
    file_format: FileFormat = Field(default="json", description="File transport format")
    max_file_size: int = Field(default=10 * 1024 * 1024, ge=0, description="Rotation threshold in bytes")
    max_files: int = Field(default=5, ge=1, description="Generations kept, active file included")
