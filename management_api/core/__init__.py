"""
Core business logic module.

Contains the exception hierarchy, the listing query engine and the
deletion reconciliation loop.
"""

from management_api.core.exceptions import (
    ManagementApiError,
    DocumentNotFoundError,
    DocumentConflictError,
    StatusConflictError,
    InvalidCursorError,
    StoreError,
    ObjectStorageError,
    ExternalDeleteError,
)

__all__ = [
    "ManagementApiError",
    "DocumentNotFoundError",
    "DocumentConflictError",
    "StatusConflictError",
    "InvalidCursorError",
    "StoreError",
    "ObjectStorageError",
    "ExternalDeleteError",
]
