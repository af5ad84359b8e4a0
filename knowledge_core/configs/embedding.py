"""
Embedding provider configuration settings.

Selects the embedding provider/model and bounds batch size and retries.
Vectors from different models must never be mixed, so the model name is
recorded on every stored chunk.

Dependencies: pydantic, pydantic_settings
System role: Embedding capability configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from knowledge_core.configs.base import BaseSettings


class EmbeddingSettings(BaseSettings):
    """Embedding client configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="EMBEDDING_",
        case_sensitive=False,
        extra="ignore",
    )

    provider: str = Field(default="gemini", description="Embedding provider: 'gemini'")
    model: str = Field(
        default="models/gemini-embedding-001",
        description="Provider embedding model ID",
    )
    dimension: int = Field(default=768, description="Fixed output dimensionality", ge=1)
    api_key: str | None = Field(default=None, description="Provider API key (falls back to GOOGLE_API_KEY)")
    batch_size: int = Field(
        default=100,
        description="Maximum texts per provider call",
        ge=1,
        le=100,
    )
    max_retries: int = Field(default=3, description="Attempts per embedding call", ge=1)
    retry_max_wait: float = Field(default=10.0, description="Upper bound of backoff wait in seconds")
