"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from management_api.configs.base import BaseSettings
from management_api.configs.database import DatabaseSettings
from management_api.configs.documents import DocumentsSettings, ReconciliationSettings
from management_api.configs.dynamodb import DynamoDBSettings
from management_api.configs.s3_documents import S3DocumentsSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    # Aggregated settings
    database: DatabaseSettings = DatabaseSettings()
    dynamodb: DynamoDBSettings = DynamoDBSettings()
    s3_documents: S3DocumentsSettings = S3DocumentsSettings()
    documents: DocumentsSettings = DocumentsSettings()
    reconciliation: ReconciliationSettings = ReconciliationSettings()


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from management_api.configs import get_settings
        settings = get_settings()
    """
    return Settings()
