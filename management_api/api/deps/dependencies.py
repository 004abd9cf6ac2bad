"""
Dependency injection container.

Factory functions for FastAPI dependencies.

Dependencies: management_api.configs, management_api.application, management_api.boundary
System role: DI container for service injection
"""

from functools import lru_cache

from fastapi import Depends

from management_api.application.services import DocumentService
from management_api.boundary.aws.s3_client import S3DocumentClient
from management_api.boundary.notifier import DocumentNotifier, get_document_notifier
from management_api.boundary.record_store import DocumentStore, get_document_store
from management_api.configs import Settings, get_settings
from management_api.core.pagination import FanOutQueryEngine


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self):
        self._store = None
        self._s3_client = None
        self._notifier = None
        self._document_service = None

    @property
    def store(self) -> DocumentStore:
        """Get cached document record store."""
        if self._store is None:
            self._store = get_document_store()
        return self._store

    @property
    def s3_client(self) -> S3DocumentClient:
        """Get cached S3 document client."""
        if self._s3_client is None:
            settings = get_settings()
            self._s3_client = S3DocumentClient(
                bucket=settings.s3_documents.bucket,
                region=settings.s3_documents.region,
            )
        return self._s3_client

    @property
    def notifier(self) -> DocumentNotifier:
        """Get cached status-change notifier."""
        if self._notifier is None:
            self._notifier = get_document_notifier()
        return self._notifier

    @property
    def document_service(self) -> DocumentService:
        """Get cached document service (owns the deletion reconciler)."""
        if self._document_service is None:
            settings = get_settings()
            query_engine = FanOutQueryEngine(
                self.store,
                cursor_secret=settings.documents.cursor_secret,
                page_size=settings.documents.page_size,
                fan_out_factor=settings.documents.fan_out_factor,
            )
            self._document_service = DocumentService(
                store=self.store,
                object_storage=self.s3_client,
                query_engine=query_engine,
                notifier=self.notifier,
                reconcile_interval_seconds=settings.reconciliation.interval_seconds,
                reconcile_batch_size=settings.reconciliation.batch_size,
            )
        return self._document_service

    async def shutdown(self) -> None:
        """Stop background work owned by cached services."""
        if self._document_service is not None:
            await self._document_service.reconciler.stop()

    def clear(self) -> None:
        """Clear all cached instances."""
        self._store = None
        self._s3_client = None
        self._notifier = None
        self._document_service = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_document_service(
    cache: ServiceCache = Depends(get_service_cache),
) -> DocumentService:
    """
    Get document service instance.

    Args:
        cache: Service cache (injected via Depends)

    Returns:
        DocumentService: Shared document lifecycle service
    """
    return cache.document_service
