"""
Exception hierarchy for the knowledge retrieval core.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

"Already indexed" and "too short" are not exceptions: the indexer reports
them as outcomes (see knowledge_core.models.knowledge.IndexStatus).

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class KnowledgeBaseException(Exception):
    """Base exception for all knowledge core errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(KnowledgeBaseException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class InvalidFilterError(ValidationError):
    """Raised when a search filter cannot be satisfied (e.g. unknown source type)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize invalid filter error.

        Args:
            message: Error message
            field: Filter field that was rejected
            value: Offending value
            details: Additional context
        """
        details = details or {}
        if value is not None:
            details["value"] = value
        super().__init__(message, field, details)


class SourceNotFoundError(KnowledgeBaseException):
    """Raised when no chunks exist for a (source_type, source_id) pair."""

    def __init__(
        self,
        source_type: str,
        source_id: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["source_type"] = source_type
        details["source_id"] = source_id
        super().__init__(f"Source not indexed: {source_type}/{source_id}", details)


class EmbeddingProviderError(KnowledgeBaseException):
    """Raised when the embedding provider cannot produce vectors (network, auth, quota)."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize embedding provider error.

        Args:
            message: Error message
            provider: Provider name (gemini, ...)
            details: Additional context
        """
        details = details or {}
        if provider:
            details["provider"] = provider
        super().__init__(message, details)


class IndexingError(KnowledgeBaseException):
    """Raised when an artifact cannot be written to the store."""

    def __init__(
        self,
        message: str,
        source_type: str | None = None,
        source_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if source_type:
            details["source_type"] = source_type
        if source_id:
            details["source_id"] = source_id
        super().__init__(message, details)


class RetrievalError(KnowledgeBaseException):
    """Raised when the store cannot be read during retrieval."""

    pass
