"""
Document API endpoints.

Routes:
- GET /documents - List documents, filtered by status, newest first
- GET /documents/{id} - Get single document
- POST /documents - Upload a file and create its document record
- PATCH /documents/{id} - Change document status
- DELETE /documents/{id} - Request document deletion

Dependencies: management_api.application.services, management_api.models
System role: Document HTTP API
"""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from management_api.api.deps import get_document_service, get_settings_dependency
from management_api.application.services.document_service import DocumentService
from management_api.configs import Settings
from management_api.models.document import (
    ALL_STATUS_FILTER,
    Document,
    DocumentPage,
    UpdateDocumentRequest,
)

from .document_error_handling import handle_document_errors

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


@router.get("", response_model=DocumentPage)
@handle_document_errors
async def list_documents(
    status_filter: str = Query(ALL_STATUS_FILTER, alias="status"),
    cursor: str | None = None,
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentPage:
    """
    List documents newest first.

    Args:
        status_filter: A single status, or "all" to merge every status
        cursor: Opaque cursor from a previous page
        document_service: Injected DocumentService

    Returns:
        DocumentPage: Items plus the cursor for the next page, if any

    Raises:
        HTTPException(400): Unknown status or invalid cursor
        HTTPException(503): Record store failure
    """
    return await document_service.list_documents(status_filter, cursor)


@router.get("/{document_id}", response_model=Document)
@handle_document_errors
async def get_document(
    document_id: str,
    document_service: DocumentService = Depends(get_document_service),
) -> Document:
    """Get a single document by ID."""
    return await document_service.get_document(document_id)


@router.post("", response_model=Document, status_code=201)
@handle_document_errors
async def upload_document(
    file: UploadFile = File(...),
    document_service: DocumentService = Depends(get_document_service),
    settings: Settings = Depends(get_settings_dependency),
) -> Document:
    """
    Upload a file and create a PENDING document for it.

    Args:
        file: Uploaded file (multipart)
        document_service: Injected DocumentService
        settings: Application settings

    Returns:
        Document: The created record

    Raises:
        HTTPException(400): Missing filename
        HTTPException(413): File larger than the configured limit
        HTTPException(502): Object storage upload failed
    """
    if not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Filename is required")

    content = await file.read()
    max_bytes = settings.s3_documents.max_upload_bytes
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds {max_bytes} bytes",
        )

    logger.info(
        "Document upload received",
        extra={"file_name": file.filename, "size": len(content)},
    )
    return await document_service.upload_document(
        file_name=file.filename,
        content=content,
        mimetype=file.content_type or "application/octet-stream",
    )


@router.patch("/{document_id}", response_model=Document)
@handle_document_errors
async def update_document(
    document_id: str,
    request: UpdateDocumentRequest,
    document_service: DocumentService = Depends(get_document_service),
) -> Document:
    """
    Change a document's status.

    Used by processing workers and the downstream deletion pipeline.

    Raises:
        HTTPException(404): Document not found
    """
    return await document_service.update_status(document_id, request.status)


@router.delete("/{document_id}", response_model=Document, status_code=202)
@handle_document_errors
async def delete_document(
    document_id: str,
    document_service: DocumentService = Depends(get_document_service),
) -> Document:
    """
    Request deletion of a document.

    The stored file is removed immediately; the record moves to DELETING and
    is removed once the downstream pipeline reports it DELETED.

    Returns:
        Document: The record in DELETING

    Raises:
        HTTPException(404): Document not found
        HTTPException(409): Document is being processed
        HTTPException(502): Stored file could not be removed
    """
    logger.info("Document deletion request", extra={"document_id": document_id})
    return await document_service.request_deletion(document_id)
