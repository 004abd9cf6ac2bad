"""
Document domain models and schemas.

Domain record, status enum and request/response schemas for document operations.

Dependencies: pydantic
System role: Document API contracts
"""

import enum
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DocumentStatus(str, enum.Enum):
    """
    Document lifecycle states.

    PENDING: Uploaded, waiting for a processing worker
    RUNNING: A worker is processing the document
    FINISHED: Processing succeeded
    FAILED: Processing failed
    DELETING: Stored object removed, waiting for downstream confirmation
    DELETED: Downstream confirmed removal; record awaits finalization
    DELETE_FAILED: Downstream removal failed; needs manual recovery
    """

    PENDING = "pending"
    RUNNING = "running"
    FINISHED = "finished"
    FAILED = "failed"
    DELETING = "deleting"
    DELETED = "deleted"
    DELETE_FAILED = "delete_failed"


ALL_STATUSES: tuple[DocumentStatus, ...] = tuple(DocumentStatus)

ALL_STATUS_FILTER = "all"


class Document(BaseModel):
    """A tracked document record."""

    model_config = ConfigDict(use_enum_values=False)

    document_id: str
    file_name: str
    size: int = Field(ge=0)
    mimetype: str
    created_at: datetime
    status: DocumentStatus = DocumentStatus.PENDING

    @field_validator("created_at")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @property
    def object_key(self) -> str:
        """Object storage key: document id plus the file extension, if any."""
        _, dot, extension = self.file_name.rpartition(".")
        if dot and extension:
            return f"{self.document_id}.{extension}"
        return self.document_id


class StatusQueryResult(BaseModel):
    """One page of a single-partition indexed query."""

    items: list[Document] = Field(default_factory=list)
    next_start_key: dict[str, Any] | None = None


class DocumentPage(BaseModel):
    """Paginated document list response."""

    items: list[Document]
    next_cursor: str | None = None


class UpdateDocumentRequest(BaseModel):
    """Request schema for a status change."""

    status: DocumentStatus = Field(description="New lifecycle status")
