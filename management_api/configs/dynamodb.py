"""
DynamoDB record store configuration.

Dependencies: pydantic_settings
System role: DynamoDB table configuration for the document record store
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DynamoDBSettings(BaseSettings):
    """Settings for the DynamoDB documents table."""

    model_config = SettingsConfigDict(
        env_prefix="DYNAMODB_",
        case_sensitive=False,
        extra="ignore",
    )

    table_name: str = Field(default="documents", description="Documents table name")
    status_index: str = Field(
        default="status-createdAt-index",
        description="GSI keyed by (status, createdAt)",
    )
    region: str = Field(default="us-east-1", description="AWS region for DynamoDB")
    endpoint_url: str | None = Field(
        default=None,
        description="Override endpoint, e.g. http://localhost:8000 for DynamoDB Local",
    )
    max_attempts: int = Field(default=3, description="botocore retry attempts")
