"""
Retrieval configuration settings.

Scores, limits and the semantic candidate window for hybrid search.

Dependencies: pydantic, pydantic_settings
System role: Hybrid retrieval tuning
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from knowledge_core.configs.base import BaseSettings


class RetrievalSettings(BaseSettings):
    """Hybrid retriever configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RETRIEVAL_",
        case_sensitive=False,
        extra="ignore",
    )

    default_limit: int = Field(default=10, description="Results returned when no limit is given", ge=1)
    max_limit: int = Field(default=50, description="Upper bound accepted for limit", ge=1)
    min_similarity: float = Field(
        default=0.2,
        description="Minimum cosine similarity for semantic hits",
        ge=0.0,
        le=1.0,
    )
    title_match_score: float = Field(default=0.95, description="Score for a lexical hit in the title")
    content_match_score: float = Field(default=0.85, description="Score for a lexical hit in the content only")
    candidate_window: int = Field(
        default=500,
        description="Maximum chunks scanned in the semantic phase",
        ge=1,
    )
    preview_chars: int = Field(
        default=500,
        description="Content characters returned per result by the HTTP API",
        ge=1,
    )
