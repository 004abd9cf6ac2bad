"""
S3 client for document bucket operations.

Uploads raw document bytes and removes them when a document is deleted.
Blocking boto3 calls run in a worker thread so the event loop stays free.

Dependencies: boto3
System role: Object storage collaborator for the document lifecycle
"""

import asyncio
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from management_api.core.exceptions import ObjectStorageError

logger = logging.getLogger(__name__)


class S3DocumentClient:
    """S3 client for document bucket operations (upload and delete)."""

    def __init__(self, bucket: str, region: str = "us-east-1", client=None) -> None:
        """
        Initialize S3 client for document bucket.

        Args:
            bucket: S3 bucket name for document storage
            region: AWS region for S3 bucket
            client: Pre-built boto3 client (tests inject a stub)
        """
        self._bucket = bucket
        self._region = region
        self._s3_client = client or boto3.client("s3", region_name=region)

    @property
    def bucket(self) -> str:
        return self._bucket

    async def upload_document(self, key: str, body: bytes, content_type: str) -> dict:
        """
        Upload document bytes to the bucket.

        Args:
            key: S3 object key (path in bucket)
            body: File content
            content_type: MIME type of the file

        Returns:
            dict: key, location and ETag of the stored object

        Raises:
            ObjectStorageError: If the upload fails
        """
        logger.info(
            "Uploading document to S3",
            extra={"bucket": self._bucket, "key": key, "content_type": content_type},
        )
        try:
            result = await asyncio.to_thread(
                self._s3_client.put_object,
                Bucket=self._bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "Failed to upload document to S3",
                extra={"bucket": self._bucket, "key": key, "error": str(e)},
            )
            raise ObjectStorageError(
                f"Failed to upload S3 object: {key}",
                key=key,
                details={"bucket": self._bucket, "error": str(e)},
            ) from e

        return {
            "key": key,
            "location": f"https://{self._bucket}.s3.amazonaws.com/{key}",
            "etag": result.get("ETag"),
        }

    async def delete_document(self, key: str) -> dict:
        """
        Delete a stored document object.

        S3 treats deleting a missing key as success, so retries are safe.

        Args:
            key: S3 object key to delete

        Returns:
            dict: key, deleted flag and version id

        Raises:
            ObjectStorageError: If the delete call fails
        """
        logger.info("Deleting document from S3", extra={"bucket": self._bucket, "key": key})
        try:
            result = await asyncio.to_thread(
                self._s3_client.delete_object,
                Bucket=self._bucket,
                Key=key,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "Failed to delete document from S3",
                extra={"bucket": self._bucket, "key": key, "error": str(e)},
            )
            raise ObjectStorageError(
                f"Failed to delete S3 object: {key}",
                key=key,
                details={"bucket": self._bucket, "error": str(e)},
            ) from e

        logger.info(
            "Deleted document from S3 successfully",
            extra={"bucket": self._bucket, "key": key, "version_id": result.get("VersionId")},
        )
        return {"key": key, "deleted": True, "version_id": result.get("VersionId")}
