"""
Document ORM model.

Represents uploaded documents with lifecycle status and file metadata.
The composite (status, created_at, document_id) index backs the
per-status listing queries.

Dependencies: sqlalchemy, management_api.boundary.db.base
System role: Document persistence for lifecycle tracking
"""

from sqlalchemy import BigInteger, Enum, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from management_api.boundary.db.base import Base, TimestampMixin
from management_api.models.document import Document, DocumentStatus


class DocumentModel(Base, TimestampMixin):
    """
    Document ORM model tracking upload and deletion lifecycle.

    Lifecycle: Upload (PENDING) → worker processing (RUNNING) → FINISHED or
    FAILED. Deletion requests move the row to DELETING; once the downstream
    pipeline reports DELETED the reconciliation sweep removes the row.

    Attributes:
        document_id: String primary key assigned at creation
        file_name: Original filename (512 char limit)
        size: File size in bytes
        mimetype: Content type reported at upload
        status: Current lifecycle state
        created_at: Upload timestamp (UTC, listing sort key)
        updated_at: Last status change timestamp (UTC)
    """

    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_status_created_at", "status", "created_at", "document_id"),
    )

    document_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    file_name: Mapped[str] = mapped_column(
        String(512),
        nullable=False,
        doc="Original filename",
    )

    size: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    mimetype: Mapped[str] = mapped_column(String(255), nullable=False)

    status: Mapped[DocumentStatus] = mapped_column(
        Enum(DocumentStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=DocumentStatus.PENDING,
    )

    def to_document(self) -> Document:
        """Convert the row into the domain record."""
        return Document(
            document_id=self.document_id,
            file_name=self.file_name,
            size=self.size,
            mimetype=self.mimetype,
            created_at=self.created_at,
            status=self.status,
        )
