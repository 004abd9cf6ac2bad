"""
Document error handling utilities.

Provides a decorator that maps document lifecycle errors to HTTPExceptions
consistently across the document endpoints.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status

from management_api.core.exceptions import (
    DocumentConflictError,
    DocumentNotFoundError,
    InvalidCursorError,
    ObjectStorageError,
    StoreError,
)

logger = logging.getLogger(__name__)

# Type for the decorated function
F = TypeVar("F", bound=Callable[..., Any])


def handle_document_errors(func: F) -> F:
    """
    Decorator to transform document errors into HTTPExceptions.

    Mapping:
    - DocumentNotFoundError -> 404
    - DocumentConflictError -> 409
    - InvalidCursorError, ValueError -> 400
    - ObjectStorageError (including ExternalDeleteError) -> 502
    - StoreError -> 503
    - anything else -> 500
    """
    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except HTTPException:
            raise

        except DocumentNotFoundError as e:
            logger.warning("Document not found", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

        except DocumentConflictError as e:
            logger.warning("Document state conflict", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)

        except InvalidCursorError as e:
            logger.warning("Invalid cursor", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

        except ValueError as e:
            logger.warning("Invalid request (ValueError)", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        except ObjectStorageError as e:
            logger.error("Object storage failure", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)

        except StoreError as e:
            logger.error("Record store failure", extra={"error": str(e)})
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Document store unavailable",
            )

        except Exception as e:
            logger.exception(
                "Unexpected failure in document operation",
                extra={"error": str(e)},
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="An internal error occurred during document operation",
            )

    return wrapper  # type: ignore
