"""
Test suite for dependency injection container and configuration.

Tests the service cache, the record store factory and settings loading.

System role: Verification of DI container
"""

import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from management_api.api.deps import ServiceCache, get_document_service
from management_api.application.services import DocumentService
from management_api.boundary.db.document_store import SQLDocumentStore
from management_api.boundary.dynamodb.document_table import DynamoDocumentStore
from management_api.boundary.notifier import InMemoryNotifier
from management_api.boundary.record_store import get_document_store
from management_api.configs import Settings
from management_api.configs.documents import DocumentsSettings, ReconciliationSettings
from management_api.main import warn_on_default_cursor_secret


@pytest.fixture
def settings() -> Settings:
    """Provide settings with small, recognizable values."""
    return Settings(
        documents=DocumentsSettings(page_size=5, fan_out_factor=3, cursor_secret="s3cret"),
        reconciliation=ReconciliationSettings(interval_seconds=1.5, batch_size=20),
    )


class TestServiceCache:
    """Test suite for ServiceCache."""

    def test_document_service_should_be_built_from_settings(
        self, settings: Settings, memory_store
    ) -> None:
        """Test the service is wired with configured sizes and collaborators."""
        # Arrange
        cache = ServiceCache()
        with patch(
            "management_api.api.deps.dependencies.get_settings", return_value=settings
        ), patch(
            "management_api.api.deps.dependencies.get_document_store", return_value=memory_store
        ), patch("management_api.api.deps.dependencies.S3DocumentClient") as s3_cls:
            # Act
            service = cache.document_service

        # Assert
        assert isinstance(service, DocumentService)
        assert service.store is memory_store
        assert service.query_engine.page_size == 5
        assert service.query_engine.fetch_limit == 15
        assert service.reconciler.interval_seconds == 1.5
        assert service.reconciler.batch_size == 20
        s3_cls.assert_called_once_with(
            bucket=settings.s3_documents.bucket, region=settings.s3_documents.region
        )

    def test_document_service_should_be_cached(self, memory_store) -> None:
        """Test repeated access returns the same instance until cleared."""
        # Arrange
        cache = ServiceCache()
        with patch(
            "management_api.api.deps.dependencies.get_document_store", return_value=memory_store
        ), patch("management_api.api.deps.dependencies.S3DocumentClient"):
            # Act
            first = cache.document_service
            second = cache.document_service
            cache.clear()
            third = cache.document_service

        # Assert
        assert first is second
        assert third is not first

    def test_notifier_should_follow_configured_backend(self) -> None:
        """Test the cached notifier comes from the configured backend."""
        # Arrange
        cache = ServiceCache()
        settings = Settings(documents=DocumentsSettings(notifier_backend="memory"))

        # Act
        with patch("management_api.boundary.notifier.get_settings", return_value=settings):
            notifier = cache.notifier

        # Assert
        assert isinstance(notifier, InMemoryNotifier)
        assert cache.notifier is notifier

    @pytest.mark.asyncio
    async def test_shutdown_should_stop_reconciler(self) -> None:
        """Test shutdown stops background work of a built service."""
        # Arrange
        cache = ServiceCache()
        service = MagicMock()
        service.reconciler.stop = AsyncMock()
        cache._document_service = service

        # Act
        await cache.shutdown()

        # Assert
        service.reconciler.stop.assert_awaited_once()

    def test_get_document_service_should_use_cache(self) -> None:
        """Test the FastAPI dependency reads from the given cache."""
        # Arrange
        cache = MagicMock()

        # Act & Assert
        assert get_document_service(cache=cache) is cache.document_service


class TestGetDocumentStore:
    """Test suite for the record store factory."""

    def test_sql_backend_should_create_sql_store(self) -> None:
        """Test the default backend is SQL."""
        # Arrange
        settings = Settings(documents=DocumentsSettings(record_store_backend="sql"))
        with patch("management_api.boundary.record_store.get_settings", return_value=settings), patch(
            "management_api.boundary.db.connection.get_async_engine"
        ):
            # Act
            store = get_document_store()

        # Assert
        assert isinstance(store, SQLDocumentStore)

    def test_dynamodb_backend_should_create_dynamo_store(self) -> None:
        """Test DynamoDB is selected case-insensitively."""
        # Arrange
        settings = Settings(documents=DocumentsSettings(record_store_backend="DynamoDB"))
        with patch("management_api.boundary.record_store.get_settings", return_value=settings), patch(
            "management_api.boundary.dynamodb.document_table.boto3"
        ) as boto3_mock:
            # Act
            store = get_document_store()

        # Assert
        assert isinstance(store, DynamoDocumentStore)
        assert boto3_mock.client.call_args.args == ("dynamodb",)

    def test_unknown_backend_should_raise(self) -> None:
        """Test an unsupported backend name is rejected."""
        settings = Settings(documents=DocumentsSettings(record_store_backend="redis"))
        with patch("management_api.boundary.record_store.get_settings", return_value=settings):
            with pytest.raises(ValueError, match="redis"):
                get_document_store()


class TestSettings:
    """Test suite for settings loading."""

    def test_defaults_should_match_listing_contract(self) -> None:
        """Test default page size, fan-out and sweep interval."""
        settings = Settings()

        assert settings.documents.page_size == 10
        assert settings.documents.fan_out_factor == 10
        assert settings.reconciliation.interval_seconds == 5.0

    def test_environment_should_override_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test prefixed environment variables are honored."""
        # Arrange
        monkeypatch.setenv("DOCUMENTS_PAGE_SIZE", "25")
        monkeypatch.setenv("RECONCILIATION_INTERVAL_SECONDS", "0.5")

        # Act
        documents = DocumentsSettings()
        reconciliation = ReconciliationSettings()

        # Assert
        assert documents.page_size == 25
        assert reconciliation.interval_seconds == 0.5

    def test_default_cursor_secret_should_be_flagged(
        self, caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test startup warns when cursors use the published default key."""
        # Arrange
        monkeypatch.delenv("DOCUMENTS_CURSOR_SECRET", raising=False)
        insecure = Settings(documents=DocumentsSettings())
        configured = Settings(documents=DocumentsSettings(cursor_secret="rotated-key"))

        # Act
        with caplog.at_level(logging.WARNING, logger="management_api.main"):
            flagged = warn_on_default_cursor_secret(insecure)
            not_flagged = warn_on_default_cursor_secret(configured)

        # Assert
        assert flagged is True
        assert not_flagged is False
        assert len([r for r in caplog.records if "DOCUMENTS_CURSOR_SECRET" in r.getMessage()]) == 1
