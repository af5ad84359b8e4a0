"""
Chunking configuration settings.

Token budgets for the sentence chunker and minimum useful content
lengths below which artifacts or pieces are never stored.

Dependencies: pydantic, pydantic_settings
System role: Chunking and ingestion thresholds
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from knowledge_core.configs.base import BaseSettings


class ChunkingSettings(BaseSettings):
    """Chunker and ingestion threshold configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CHUNKING_",
        case_sensitive=False,
        extra="ignore",
    )

    max_tokens: int = Field(default=500, description="Target chunk size in estimated tokens", ge=1)
    overlap_tokens: int = Field(default=50, description="Overlap seeded into each new chunk", ge=0)
    min_chunk_chars: int = Field(
        default=20,
        description="Chunks shorter than this (stripped) are skipped",
        ge=0,
    )
    min_content_chars: dict[str, int] = Field(
        default={
            "transcript": 50,
            "slide": 30,
            "cornell-note": 100,
            "summary": 50,
        },
        description="Minimum artifact length per source type; unknown types use 0",
    )
