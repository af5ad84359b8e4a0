"""
Database configuration settings.

Manages the knowledge store connection parameters for SQLAlchemy.
PostgreSQL (asyncpg) in deployment, any async SQLAlchemy URL via override.

Dependencies: pydantic, pydantic_settings
System role: Database connection configuration for ORM
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from knowledge_core.configs.base import BaseSettings


class DatabaseSettings(BaseSettings):
    """Knowledge store database configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="POSTGRES_",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = Field(default="localhost", description="PostgreSQL host")
    port: int = Field(default=5432, description="PostgreSQL port")
    user: str = Field(default="postgres", description="PostgreSQL user")
    password: str = Field(default="postgres", description="PostgreSQL password")
    db: str = Field(default="knowledge", description="PostgreSQL database name")

    url: str | None = Field(
        default=None,
        description="Full async SQLAlchemy URL; overrides host/port/user/db when set",
    )

    pool_size: int = Field(default=10, description="Connection pool size")
    max_overflow: int = Field(default=20, description="Maximum overflow connections")
    pool_timeout: int = Field(default=30, description="Connection pool timeout in seconds")
    echo_sql: bool = Field(default=False, description="Echo SQL statements to logs")

    @property
    def async_database_url(self) -> str:
        """
        Construct async database connection URL.

        Returns:
            str: SQLAlchemy async-compatible database URL
        """
        if self.url:
            return self.url
        return (
            f"postgresql+asyncpg://{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.db}"
        )

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured URL points at SQLite (no pooling options)."""
        return self.async_database_url.startswith("sqlite")
