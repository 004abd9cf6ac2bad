"""
Document service orchestrator.

Coordinates document creation, status changes, listing and the deletion
lifecycle. Owns the deletion reconciler and starts it whenever a deletion
is accepted.

Dependencies: management_api.boundary, management_api.core
System role: Document lifecycle coordination
"""

import logging
import uuid
from datetime import datetime, timezone

from management_api.boundary.aws.s3_client import S3DocumentClient
from management_api.boundary.notifier import DocumentNotifier, LoggingNotifier
from management_api.boundary.record_store import DocumentStore
from management_api.core.exceptions import (
    DocumentConflictError,
    DocumentNotFoundError,
    ExternalDeleteError,
    ObjectStorageError,
    StatusConflictError,
)
from management_api.core.pagination.fan_out import FanOutQueryEngine
from management_api.core.reconciliation import DeletionReconciler
from management_api.models.document import (
    ALL_STATUS_FILTER,
    Document,
    DocumentPage,
    DocumentStatus,
)

logger = logging.getLogger(__name__)


class DocumentService:
    """
    Document lifecycle coordinator.

    Status transitions:
        create → PENDING
        PENDING/RUNNING → FINISHED | FAILED        (processing workers)
        PENDING/FINISHED/FAILED/DELETE_FAILED → DELETING   (request_deletion)
        RUNNING → DELETING                         rejected with a conflict
        DELETING → DELETED | DELETE_FAILED         (downstream pipeline)
        DELETED → record removed                   (reconciler)
    """

    def __init__(
        self,
        store: DocumentStore,
        object_storage: S3DocumentClient,
        query_engine: FanOutQueryEngine,
        notifier: DocumentNotifier | None = None,
        reconcile_interval_seconds: float = 5.0,
        reconcile_batch_size: int = 100,
    ) -> None:
        """
        Initialize document service.

        Args:
            store: Record store for document metadata
            object_storage: Client for the stored document bytes
            query_engine: Listing engine over the same store
            notifier: Receives documents after each status change
            reconcile_interval_seconds: Delay between reconciliation ticks
            reconcile_batch_size: Documents read per status on each tick
        """
        self.store = store
        self.object_storage = object_storage
        self.query_engine = query_engine
        self.notifier = notifier or LoggingNotifier()
        self.reconciler = DeletionReconciler(
            store,
            self.finalize_deletion,
            interval_seconds=reconcile_interval_seconds,
            batch_size=reconcile_batch_size,
        )

    async def _notify(self, document: Document) -> None:
        try:
            await self.notifier.notify(document)
        except Exception as e:
            logger.warning(
                "Document notification failed",
                extra={"document_id": document.document_id, "error": str(e)},
            )

    async def create_document(
        self,
        file_name: str,
        size: int,
        mimetype: str,
        document_id: str | None = None,
    ) -> str:
        """
        Create a PENDING document record.

        Args:
            file_name: Original filename
            size: File size in bytes
            mimetype: Content type
            document_id: Pre-generated ID (the upload path names the object with it)

        Returns:
            str: The document ID
        """
        document = Document(
            document_id=document_id or str(uuid.uuid4()),
            file_name=file_name,
            size=size,
            mimetype=mimetype,
            created_at=datetime.now(timezone.utc),
            status=DocumentStatus.PENDING,
        )
        logger.info(
            "Creating document record",
            extra={"document_id": document.document_id, "file_name": file_name},
        )
        await self.store.put(document)
        await self._notify(document)
        return document.document_id

    async def upload_document(self, file_name: str, content: bytes, mimetype: str) -> Document:
        """
        Store the file bytes, then create the document record.

        Args:
            file_name: Original filename
            content: File bytes
            mimetype: Content type

        Returns:
            Document: The created record

        Raises:
            ObjectStorageError: If the upload fails (no record is created)
        """
        document_id = str(uuid.uuid4())
        placeholder = Document(
            document_id=document_id,
            file_name=file_name,
            size=len(content),
            mimetype=mimetype,
            created_at=datetime.now(timezone.utc),
        )
        await self.object_storage.upload_document(placeholder.object_key, content, mimetype)
        await self.create_document(file_name, len(content), mimetype, document_id=document_id)
        return await self.get_document(document_id)

    async def get_document(self, document_id: str) -> Document:
        """
        Fetch one document.

        Raises:
            DocumentNotFoundError: If no record exists
        """
        logger.info("Fetching document", extra={"document_id": document_id})
        document = await self.store.get(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    async def list_documents(
        self,
        status_filter: DocumentStatus | str = ALL_STATUS_FILTER,
        cursor: str | None = None,
    ) -> DocumentPage:
        """Return one listing page; see FanOutQueryEngine.list_documents."""
        logger.info(
            "Fetching documents list",
            extra={"status_filter": str(status_filter), "has_cursor": cursor is not None},
        )
        return await self.query_engine.list_documents(status_filter, cursor)

    async def update_status(self, document_id: str, status: DocumentStatus) -> Document:
        """
        Persist a new status unconditionally.

        Callers are responsible for only requesting legal transitions.

        Raises:
            DocumentNotFoundError: If no record exists
        """
        logger.info(
            "Updating document",
            extra={"document_id": document_id, "new_status": status.value},
        )
        document = await self.store.update_status(document_id, status)
        if document is None:
            raise DocumentNotFoundError(document_id)
        await self._notify(document)
        return document

    async def request_deletion(self, document_id: str) -> Document:
        """
        Remove the stored object and move the document to DELETING.

        The stored object is removed first; when that fails the status is left
        untouched so the request can be retried. The final write only applies
        if the document is still not RUNNING.

        Returns:
            Document: The record in DELETING

        Raises:
            DocumentNotFoundError: If no record exists
            DocumentConflictError: If the document is RUNNING
            ExternalDeleteError: If the stored object could not be removed
        """
        document = await self.get_document(document_id)
        if document.status == DocumentStatus.RUNNING:
            logger.warning(
                "Deletion rejected: document is running",
                extra={"document_id": document_id},
            )
            raise DocumentConflictError(document_id, document.status.value)

        try:
            await self.object_storage.delete_document(document.object_key)
        except ObjectStorageError as e:
            raise ExternalDeleteError(
                f"Failed to delete stored object for document {document_id}",
                key=document.object_key,
                details={"document_id": document_id, "error": str(e)},
            ) from e

        try:
            updated = await self.store.update_status(
                document_id,
                DocumentStatus.DELETING,
                unless_status=DocumentStatus.RUNNING,
            )
        except StatusConflictError as e:
            raise DocumentConflictError(
                document_id,
                DocumentStatus.RUNNING.value,
                message=f"Document {document_id} started running during deletion",
            ) from e
        if updated is None:
            raise DocumentNotFoundError(document_id)

        logger.info("Document deletion requested", extra={"document_id": document_id})
        await self._notify(updated)
        await self.reconciler.ensure_running()
        return updated

    async def finalize_deletion(self, document_id: str) -> None:
        """Remove a document record; removing a missing record is a no-op."""
        logger.info("Finalizing document deletion", extra={"document_id": document_id})
        removed = await self.store.delete(document_id)
        if not removed:
            logger.info("Document already finalized", extra={"document_id": document_id})
