"""
SQL record store adapter.

Implements the DocumentStore contract over the documents table. Each call
runs in its own session and transaction so concurrent partition queries
never share a connection.

Dependencies: sqlalchemy, management_api.boundary.db.CRUD
System role: Document record persistence (SQL backend)
"""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from management_api.boundary.db.CRUD.document_crud import document_crud
from management_api.core.exceptions import InvalidCursorError, StatusConflictError, StoreError
from management_api.models.document import Document, DocumentStatus, StatusQueryResult

logger = logging.getLogger(__name__)


class SQLDocumentStore:
    """Record store backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        """
        Initialize the store.

        Args:
            session_factory: Factory producing AsyncSession instances
        """
        self._session_factory = session_factory

    async def put(self, document: Document) -> None:
        try:
            async with self._session_factory() as session:
                await document_crud.create(
                    session,
                    document_id=document.document_id,
                    file_name=document.file_name,
                    size=document.size,
                    mimetype=document.mimetype,
                    status=document.status,
                    created_at=document.created_at,
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(
                f"Failed to write document: {document.document_id}",
                operation="put",
                details={"document_id": document.document_id, "error": str(e)},
            ) from e

    async def get(self, document_id: str) -> Document | None:
        try:
            async with self._session_factory() as session:
                row = await document_crud.get_by_id(session, document_id)
                return row.to_document() if row else None
        except SQLAlchemyError as e:
            raise StoreError(
                f"Failed to fetch document: {document_id}",
                operation="get",
                details={"document_id": document_id, "error": str(e)},
            ) from e

    async def delete(self, document_id: str) -> bool:
        try:
            async with self._session_factory() as session:
                deleted = await document_crud.delete_by_id(session, document_id)
                await session.commit()
                return deleted
        except SQLAlchemyError as e:
            raise StoreError(
                f"Failed to delete document: {document_id}",
                operation="delete",
                details={"document_id": document_id, "error": str(e)},
            ) from e

    async def update(self, document_id: str, **fields: Any) -> Document | None:
        try:
            async with self._session_factory() as session:
                row = await document_crud.update_by_id(session, document_id, **fields)
                await session.commit()
                return row.to_document() if row else None
        except SQLAlchemyError as e:
            raise StoreError(
                f"Failed to update document: {document_id}",
                operation="update",
                details={"document_id": document_id, "error": str(e)},
            ) from e

    async def update_status(
        self,
        document_id: str,
        status: DocumentStatus,
        unless_status: DocumentStatus | None = None,
    ) -> Document | None:
        try:
            async with self._session_factory() as session:
                row = await document_crud.update_status(
                    session, document_id, status, unless_status=unless_status
                )
                if row is None:
                    if unless_status is not None and await document_crud.exists(session, document_id):
                        raise StatusConflictError(
                            document_id, details={"unless_status": unless_status.value}
                        )
                    return None
                await session.commit()
                return row.to_document()
        except SQLAlchemyError as e:
            raise StoreError(
                f"Failed to update document status: {document_id}",
                operation="update",
                details={"document_id": document_id, "status": status.value, "error": str(e)},
            ) from e

    def start_key_for(self, document: Document) -> dict[str, Any]:
        return document_crud.start_key_for(document)

    async def query_by_status(
        self,
        status: DocumentStatus,
        limit: int,
        start_key: dict[str, Any] | None = None,
        descending: bool = True,
    ) -> StatusQueryResult:
        try:
            async with self._session_factory() as session:
                rows, next_key = await document_crud.get_page_by_status(
                    session, status, limit, start_key=start_key, descending=descending
                )
                return StatusQueryResult(
                    items=[row.to_document() for row in rows],
                    next_start_key=next_key,
                )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidCursorError(
                "malformed start key",
                details={"status": status.value, "error": str(e)},
            ) from e
        except SQLAlchemyError as e:
            raise StoreError(
                f"Failed to fetch documents with status: {status.value}",
                operation="query",
                details={"status": status.value, "error": str(e)},
            ) from e
