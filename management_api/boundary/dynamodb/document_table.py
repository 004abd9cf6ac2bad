"""
DynamoDB record store adapter.

Implements the DocumentStore contract over a DynamoDB table keyed by
documentId with a global secondary index on (status, createdAt).
Continuation keys are keyset positions in (createdAt, documentId) order.

Dependencies: boto3
System role: Document record persistence (DynamoDB backend)
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from management_api.core.exceptions import InvalidCursorError, StatusConflictError, StoreError
from management_api.models.document import Document, DocumentStatus, StatusQueryResult

logger = logging.getLogger(__name__)

# Domain field name -> table attribute name
ATTRIBUTE_NAMES = {
    "document_id": "documentId",
    "file_name": "fileName",
    "size": "size",
    "mimetype": "mimetype",
    "created_at": "createdAt",
    "status": "status",
}

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def format_created_at(value: datetime) -> str:
    """Fixed-width UTC ISO string so the index sorts lexicographically by time."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _to_attribute_value(field: str, value: Any) -> dict[str, Any]:
    if field == "created_at":
        value = format_created_at(value)
    elif isinstance(value, DocumentStatus):
        value = value.value
    return _serializer.serialize(value)


def serialize_document(document: Document) -> dict[str, Any]:
    """Convert a Document into a low-level DynamoDB item."""
    return {
        ATTRIBUTE_NAMES[field]: _to_attribute_value(field, getattr(document, field))
        for field in ATTRIBUTE_NAMES
    }


def deserialize_document(item: dict[str, Any]) -> Document:
    """Convert a low-level DynamoDB item into a Document."""
    plain = {key: _deserializer.deserialize(value) for key, value in item.items()}
    return Document(
        document_id=plain["documentId"],
        file_name=plain["fileName"],
        size=int(plain.get("size", 0)),
        mimetype=plain["mimetype"],
        created_at=datetime.fromisoformat(plain["createdAt"]),
        status=DocumentStatus(plain["status"]),
    )


def _is_past(document: Document, after: tuple[datetime, str], descending: bool) -> bool:
    key = (document.created_at, document.document_id)
    return key < after if descending else key > after


class DynamoDocumentStore:
    """Record store backed by a DynamoDB table."""

    def __init__(
        self,
        table_name: str,
        index_name: str = "status-createdAt-index",
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        max_attempts: int = 3,
        client: Any = None,
    ) -> None:
        """
        Initialize DynamoDB client for the documents table.

        Args:
            table_name: Documents table name
            index_name: GSI keyed by (status, createdAt)
            region: AWS region for the table
            endpoint_url: Optional endpoint override (DynamoDB Local)
            max_attempts: botocore standard-mode retry attempts
            client: Pre-built client (tests inject a stub)
        """
        self._table_name = table_name
        self._index_name = index_name
        self._client = client or boto3.client(
            "dynamodb",
            region_name=region,
            endpoint_url=endpoint_url,
            config=Config(retries={"max_attempts": max_attempts, "mode": "standard"}),
        )

    async def _call(self, operation: str, method: str, **params: Any) -> dict[str, Any]:
        try:
            return await asyncio.to_thread(getattr(self._client, method), **params)
        except (ClientError, BotoCoreError) as e:
            raise StoreError(
                f"DynamoDB {method} failed",
                operation=operation,
                details={"table": self._table_name, "error": str(e)},
            ) from e

    async def put(self, document: Document) -> None:
        await self._call(
            "put",
            "put_item",
            TableName=self._table_name,
            Item=serialize_document(document),
            ConditionExpression="attribute_not_exists(documentId)",
        )

    async def get(self, document_id: str) -> Document | None:
        response = await self._call(
            "get",
            "get_item",
            TableName=self._table_name,
            Key={"documentId": {"S": document_id}},
        )
        item = response.get("Item")
        return deserialize_document(item) if item else None

    async def delete(self, document_id: str) -> bool:
        response = await self._call(
            "delete",
            "delete_item",
            TableName=self._table_name,
            Key={"documentId": {"S": document_id}},
            ReturnValues="ALL_OLD",
        )
        return bool(response.get("Attributes"))

    async def _update(
        self,
        document_id: str,
        fields: dict[str, Any],
        condition: str,
        extra_values: dict[str, Any] | None = None,
    ) -> Document | None:
        names: dict[str, str] = {}
        values: dict[str, Any] = dict(extra_values or {})
        assignments = []
        for index, (field, value) in enumerate(fields.items()):
            # status is a reserved word, so every attribute goes through a placeholder
            names[f"#f{index}"] = ATTRIBUTE_NAMES[field]
            values[f":v{index}"] = _to_attribute_value(field, value)
            assignments.append(f"#f{index} = :v{index}")
        if "#status" in condition:
            names["#status"] = "status"

        params: dict[str, Any] = {
            "TableName": self._table_name,
            "Key": {"documentId": {"S": document_id}},
            "UpdateExpression": "SET " + ", ".join(assignments),
            "ConditionExpression": condition,
            "ExpressionAttributeNames": names,
            "ExpressionAttributeValues": values,
            "ReturnValues": "ALL_NEW",
        }
        try:
            response = await asyncio.to_thread(self._client.update_item, **params)
        except (ClientError, BotoCoreError) as e:
            if isinstance(e, ClientError) and (
                e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"
            ):
                return None
            raise StoreError(
                "DynamoDB update_item failed",
                operation="update",
                details={"document_id": document_id, "error": str(e)},
            ) from e
        return deserialize_document(response["Attributes"])

    async def update(self, document_id: str, **fields: Any) -> Document | None:
        invalid = [f for f in fields if f not in ATTRIBUTE_NAMES or f == "document_id"]
        if not fields or invalid:
            raise ValueError(f"Cannot update fields: {invalid or list(fields)}")
        return await self._update(document_id, fields, "attribute_exists(documentId)")

    async def update_status(
        self,
        document_id: str,
        status: DocumentStatus,
        unless_status: DocumentStatus | None = None,
    ) -> Document | None:
        if unless_status is None:
            return await self._update(document_id, {"status": status}, "attribute_exists(documentId)")

        updated = await self._update(
            document_id,
            {"status": status},
            "attribute_exists(documentId) AND #status <> :unless",
            extra_values={":unless": {"S": unless_status.value}},
        )
        if updated is None and await self.get(document_id) is not None:
            raise StatusConflictError(document_id, details={"unless_status": unless_status.value})
        return updated

    def start_key_for(self, document: Document) -> dict[str, Any]:
        return {
            "documentId": {"S": document.document_id},
            "status": {"S": document.status.value},
            "createdAt": {"S": format_created_at(document.created_at)},
        }

    async def query_by_status(
        self,
        status: DocumentStatus,
        limit: int,
        start_key: dict[str, Any] | None = None,
        descending: bool = True,
    ) -> StatusQueryResult:
        """
        Page one status partition in (createdAt, documentId) order.

        The index returns items sharing a createdAt in no defined order, so
        LastEvaluatedKey cannot mark a position in the listing order. Each
        page instead reads whole createdAt groups, sorts them by document
        id and continues from a keyset position, as the SQL store does.
        """
        names = {"#status": "status"}
        values: dict[str, Any] = {":status": {"S": status.value}}
        key_condition = "#status = :status"
        after = None
        if start_key:
            try:
                after = (
                    datetime.fromisoformat(start_key["createdAt"]["S"]),
                    start_key["documentId"]["S"],
                )
            except (KeyError, TypeError, ValueError) as e:
                raise InvalidCursorError(
                    "malformed start key",
                    details={"status": status.value, "error": str(e)},
                ) from e
            names["#createdAt"] = "createdAt"
            values[":createdAt"] = start_key["createdAt"]
            key_condition += " AND #createdAt " + ("<=" if descending else ">=") + " :createdAt"

        params: dict[str, Any] = {
            "TableName": self._table_name,
            "IndexName": self._index_name,
            "KeyConditionExpression": key_condition,
            "ExpressionAttributeNames": names,
            "ExpressionAttributeValues": values,
            "Limit": limit + 1,
            "ScanIndexForward": not descending,
        }

        # Index order, so created_at is monotonic along this list
        documents: list[Document] = []
        while True:
            response = await self._call("query", "query", **params)
            for item in response.get("Items", []):
                document = deserialize_document(item)
                if after is None or _is_past(document, after, descending):
                    documents.append(document)
            last_evaluated = response.get("LastEvaluatedKey")
            if last_evaluated is None or (
                len(documents) > limit
                and documents[-1].created_at != documents[limit - 1].created_at
            ):
                break
            params["ExclusiveStartKey"] = last_evaluated

        documents.sort(key=lambda d: (d.created_at, d.document_id), reverse=descending)
        page = documents[:limit]
        has_more = len(documents) > limit or last_evaluated is not None
        return StatusQueryResult(
            items=page,
            next_start_key=self.start_key_for(page[-1]) if has_more and page else None,
        )
