"""
Record store contract and factory.

Defines the async interface the query engine and lifecycle coordinator use
for document records, and selects the configured backend (SQL or DynamoDB).

Dependencies: management_api.configs, management_api.boundary
System role: Record store abstraction and instantiation
"""

import logging
from typing import Any, Protocol, runtime_checkable

from management_api.configs import get_settings
from management_api.models.document import Document, DocumentStatus, StatusQueryResult

logger = logging.getLogger(__name__)


@runtime_checkable
class DocumentStore(Protocol):
    """
    Status-indexed document record store.

    Every method may raise StoreError when the backend is unavailable.
    Implementations do not retry beyond their client's own policy.
    """

    async def put(self, document: Document) -> None: ...

    async def get(self, document_id: str) -> Document | None: ...

    async def delete(self, document_id: str) -> bool: ...

    async def update(self, document_id: str, **fields: Any) -> Document | None: ...

    async def update_status(
        self,
        document_id: str,
        status: DocumentStatus,
        unless_status: DocumentStatus | None = None,
    ) -> Document | None:
        """
        Write a new status.

        Returns None when the document does not exist. When unless_status is
        given and the stored status equals it, raises StatusConflictError
        without writing.
        """
        ...

    async def query_by_status(
        self,
        status: DocumentStatus,
        limit: int,
        start_key: dict[str, Any] | None = None,
        descending: bool = True,
    ) -> StatusQueryResult:
        """
        Read one status partition ordered by (created_at, document_id).

        Resuming from next_start_key, or from start_key_for(item), continues
        exactly after that item in this order.
        """
        ...

    def start_key_for(self, document: Document) -> dict[str, Any]:
        """Continuation key that resumes a status query just after this document."""
        ...


def get_document_store() -> DocumentStore:
    """
    Factory function to get the record store based on configuration.

    Returns:
        SQLDocumentStore or DynamoDocumentStore: Configured record store

    Raises:
        ValueError: If DOCUMENTS_RECORD_STORE_BACKEND is invalid
    """
    settings = get_settings()
    backend = settings.documents.record_store_backend.lower()

    if backend == "sql":
        from management_api.boundary.db.connection import get_async_session_factory
        from management_api.boundary.db.document_store import SQLDocumentStore

        logger.info(f"{__name__}:get_document_store - Creating SQL record store")
        return SQLDocumentStore(get_async_session_factory())

    elif backend == "dynamodb":
        from management_api.boundary.dynamodb.document_table import DynamoDocumentStore

        logger.info(f"{__name__}:get_document_store - Creating DynamoDB record store")
        return DynamoDocumentStore(
            table_name=settings.dynamodb.table_name,
            index_name=settings.dynamodb.status_index,
            region=settings.dynamodb.region,
            endpoint_url=settings.dynamodb.endpoint_url,
            max_attempts=settings.dynamodb.max_attempts,
        )

    else:
        raise ValueError(
            f"Invalid DOCUMENTS_RECORD_STORE_BACKEND: {backend}. "
            f"Must be 'sql' or 'dynamodb'."
        )
