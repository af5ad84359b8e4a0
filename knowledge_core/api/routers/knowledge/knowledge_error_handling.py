"""
Knowledge error handling utilities.

Provides a decorator for consistent error handling across knowledge API
endpoints, mapping the knowledge exception hierarchy to HTTP status codes.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status
from pydantic import ValidationError as PydanticValidationError

from knowledge_core.core.exceptions import (
    KnowledgeBaseException,
    SourceNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Type for the decorated function
F = TypeVar("F", bound=Callable[..., Any])


def handle_knowledge_errors(func: F) -> F:
    """
    Decorator to handle knowledge errors and transform them into HTTPExceptions.

    - ValidationError / InvalidFilterError -> 400
    - SourceNotFoundError -> 404
    - pydantic ValidationError -> 422
    - any other failure -> 500
    """
    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except HTTPException:
            raise

        except ValidationError as e:
            logger.warning("Invalid knowledge request", extra={"error": str(e)})
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"message": e.message, **e.details},
            )

        except SourceNotFoundError as e:
            logger.warning("Knowledge source not found", extra=e.details)
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=e.message,
            )

        except PydanticValidationError as e:
            logger.warning("Pydantic validation error", extra={"error": str(e)})
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=e.errors(include_url=False, include_context=False),
            )

        except KnowledgeBaseException as e:
            logger.error("Knowledge operation failed", extra={"error": str(e)})
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=e.message,
            )

        except Exception as e:
            logger.exception(
                "Unexpected failure in knowledge operation",
                extra={"error": str(e)}
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"An internal error occurred during knowledge operation: {str(e)}"
            )

    return wrapper  # type: ignore
