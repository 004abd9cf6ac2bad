"""
Exception hierarchy for the document management API.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class ManagementApiError(Exception):
    """Base exception for all document management errors."""

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


class DocumentNotFoundError(ManagementApiError):
    """Raised when a document cannot be found."""

    def __init__(self, document_id: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize document not found error.

        Args:
            document_id: ID of the missing document
            details: Additional context
        """
        details = details or {}
        details["document_id"] = document_id
        self.document_id = document_id
        super().__init__(f"Document not found: {document_id}", details)


class DocumentConflictError(ManagementApiError):
    """Raised when a lifecycle transition is not allowed in the current state."""

    def __init__(
        self,
        document_id: str,
        status: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize conflict error.

        Args:
            document_id: ID of the document
            status: Status that blocked the transition
            message: Optional override for the default message
            details: Additional context
        """
        details = details or {}
        details["document_id"] = document_id
        details["status"] = status
        self.document_id = document_id
        self.status = status
        super().__init__(
            message or f"Document {document_id} cannot be deleted while {status}",
            details,
        )


class StatusConflictError(ManagementApiError):
    """Raised by a record store when a conditional status write is rejected."""

    def __init__(self, document_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["document_id"] = document_id
        self.document_id = document_id
        super().__init__(f"Conditional status update rejected: {document_id}", details)


class InvalidCursorError(ManagementApiError):
    """Raised when a pagination cursor cannot be decoded or was replayed in the wrong mode."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(f"Invalid cursor: {message}", details)


class StoreError(ManagementApiError):
    """Raised when record store operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize store error.

        Args:
            message: Error message
            operation: Operation that failed (get, put, query, update, delete)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        self.operation = operation
        super().__init__(message, details)


class ObjectStorageError(ManagementApiError):
    """Raised when object storage operations fail."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize object storage error.

        Args:
            message: Error message
            key: Object key involved in the failed call
            details: Additional context
        """
        details = details or {}
        if key:
            details["key"] = key
        self.key = key
        super().__init__(message, details)


class ExternalDeleteError(ObjectStorageError):
    """Raised when removing a document's stored object fails during deletion."""

    pass
