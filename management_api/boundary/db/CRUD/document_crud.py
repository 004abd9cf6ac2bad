"""
Document CRUD operations.

Provides Create, Read, Update, Delete operations for DocumentModel
with the per-status keyset query used by document listings and the
conditional status write used by deletion requests.

Dependencies: sqlalchemy, management_api.boundary.db.models.document_model
System role: Document persistence operations
"""

from datetime import datetime
from typing import Any, Sequence

from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from management_api.boundary.db.CRUD.base_crud import BaseCRUD
from management_api.boundary.db.models.document_model import DocumentModel
from management_api.models.document import Document, DocumentStatus


class DocumentCRUD(BaseCRUD[DocumentModel]):
    """
    CRUD operations for DocumentModel.

    Extends BaseCRUD with status-partitioned paging and guarded status
    updates.
    """

    def __init__(self) -> None:
        """Initialize DocumentCRUD with DocumentModel."""
        super().__init__(DocumentModel)

    @staticmethod
    def start_key_for(document: DocumentModel | Document) -> dict[str, Any]:
        """
        Build the continuation key pointing just past a row.

        Args:
            document: Last row of the page, as a row or a domain record

        Returns:
            dict: JSON-safe key with the index columns of the row
        """
        return {
            "document_id": document.document_id,
            "status": document.status.value,
            "created_at": document.created_at.isoformat(),
        }

    async def get_page_by_status(
        self,
        session: AsyncSession,
        status: DocumentStatus,
        limit: int,
        start_key: dict[str, Any] | None = None,
        descending: bool = True,
    ) -> tuple[Sequence[DocumentModel], dict[str, Any] | None]:
        """
        Retrieve one page of documents with a given status.

        Rows are ordered by (created_at, document_id) so equal timestamps
        page deterministically. The page is read with one extra row to
        tell whether another page exists.

        Args:
            session: Async database session
            status: Partition to read
            limit: Maximum rows to return
            start_key: Key returned by the previous page, if any
            descending: Newest first when True

        Returns:
            tuple: (rows, next start key or None when the partition is exhausted)

        Raises:
            KeyError, ValueError: If start_key is malformed
        """
        created_at = DocumentModel.created_at
        document_id = DocumentModel.document_id

        stmt = select(DocumentModel).where(DocumentModel.status == status)

        if start_key is not None:
            after_created = datetime.fromisoformat(start_key["created_at"])
            after_id = str(start_key["document_id"])
            if descending:
                stmt = stmt.where(
                    or_(
                        created_at < after_created,
                        and_(created_at == after_created, document_id < after_id),
                    )
                )
            else:
                stmt = stmt.where(
                    or_(
                        created_at > after_created,
                        and_(created_at == after_created, document_id > after_id),
                    )
                )

        if descending:
            stmt = stmt.order_by(created_at.desc(), document_id.desc())
        else:
            stmt = stmt.order_by(created_at.asc(), document_id.asc())

        result = await session.execute(stmt.limit(limit + 1))
        rows = result.scalars().all()

        if len(rows) > limit:
            rows = rows[:limit]
            return rows, self.start_key_for(rows[-1])
        return rows, None

    async def update_status(
        self,
        session: AsyncSession,
        id: str,
        status: DocumentStatus,
        unless_status: DocumentStatus | None = None,
    ) -> DocumentModel | None:
        """
        Update document status, optionally only when it is not in a given state.

        Args:
            session: Async database session
            id: Document ID
            status: New lifecycle status
            unless_status: Skip the write when the row currently has this status

        Returns:
            Updated DocumentModel, or None if the row is missing or the
            condition rejected the write (use exists() to tell them apart)
        """
        if unless_status is None:
            return await self.update_by_id(session, id, status=status)

        stmt = (
            update(DocumentModel)
            .where(DocumentModel.document_id == id, DocumentModel.status != unless_status)
            .values(status=status)
            .returning(DocumentModel)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


document_crud = DocumentCRUD()
