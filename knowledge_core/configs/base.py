"""
Shared settings base.

Every knowledge_core settings section inherits the .env source and the
root log level from this class.

Dependencies: pydantic_settings
System role: Common root of the configuration sections
"""

from pydantic import Field
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict


class BaseSettings(PydanticBaseSettings):
    """Settings base reading .env and process environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Root log level passed to configure_logging")
