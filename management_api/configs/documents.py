"""
Document listing and lifecycle configuration.

Covers pagination, cursor signing, record store selection and the
deletion reconciliation sweep.

Dependencies: pydantic, pydantic_settings
System role: Configuration for the query engine and lifecycle coordinator
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CURSOR_SECRET = "change-me"


class DocumentsSettings(BaseSettings):
    """Pagination and record store settings."""

    model_config = SettingsConfigDict(
        env_prefix="DOCUMENTS_",
        case_sensitive=False,
        extra="ignore",
    )

    page_size: int = Field(default=10, ge=1, description="Items per listing page")
    fan_out_factor: int = Field(
        default=10,
        ge=1,
        description="Per-partition over-fetch multiple for the all-status listing",
    )
    cursor_secret: str = Field(
        default=DEFAULT_CURSOR_SECRET,
        description="HMAC key used to sign pagination cursors",
    )
    record_store_backend: str = Field(
        default="sql",
        description="Record store backend: 'sql' or 'dynamodb'",
    )
    notifier_backend: str = Field(
        default="logging",
        description="Status change notifier: 'logging' or 'memory'",
    )

    @property
    def uses_default_cursor_secret(self) -> bool:
        """True when cursors would be signed with the published default key."""
        return self.cursor_secret == DEFAULT_CURSOR_SECRET


class ReconciliationSettings(BaseSettings):
    """Settings for the background deletion sweep."""

    model_config = SettingsConfigDict(
        env_prefix="RECONCILIATION_",
        case_sensitive=False,
        extra="ignore",
    )

    interval_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Delay between sweep ticks",
    )
    batch_size: int = Field(
        default=100,
        ge=1,
        description="Maximum documents read per status on each tick",
    )
