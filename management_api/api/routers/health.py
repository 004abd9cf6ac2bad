"""
Health check API endpoints.

Routes: GET /health, GET /health/reconciler

Dependencies: management_api.api.deps
System role: Health check HTTP API
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from management_api.api.deps import get_document_service
from management_api.application.services.document_service import DocumentService


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(status="healthy", message="Server Healthy")


@router.get("/reconciler", response_model=HealthResponse)
async def health_check_reconciler(
    document_service: DocumentService = Depends(get_document_service),
) -> HealthResponse:
    """Report whether the deletion reconciler is currently running."""
    running = document_service.reconciler.is_running
    return HealthResponse(
        status="healthy",
        message="Reconciler running" if running else "Reconciler idle",
    )
