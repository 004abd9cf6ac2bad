"""
Fan-out query engine for document listings.

A single-status listing is one indexed range query. The all-status listing
has no native global-order scan, so it queries every status partition
concurrently, over-fetches from each, and merges the candidates into one
page ordered by (created_at, document_id) descending.

Dependencies: asyncio, management_api.boundary.record_store
System role: Cross-partition paginated query orchestration
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from management_api.boundary.record_store import DocumentStore
from management_api.core.exceptions import InvalidCursorError, ManagementApiError, StoreError
from management_api.core.pagination.cursor import (
    ALL_MODE,
    SINGLE_MODE,
    AllPartitionCursor,
    SinglePartitionCursor,
    decode_cursor,
    encode_cursor,
)
from management_api.models.document import (
    ALL_STATUS_FILTER,
    ALL_STATUSES,
    Document,
    DocumentPage,
    DocumentStatus,
    StatusQueryResult,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
DEFAULT_FAN_OUT_FACTOR = 10


def sort_key(document: Document) -> tuple[datetime, str]:
    """Global listing order key; listings sort on it descending."""
    return document.created_at, document.document_id


@dataclass
class _PartitionRead:
    status: DocumentStatus
    start_key: dict[str, Any] | None
    result: StatusQueryResult
    candidates: list[Document]


class FanOutQueryEngine:
    """
    Paginated document listing over status partitions.

    Attributes:
        page_size: Items per page
        fetch_limit: Items requested per partition on the all-status path
    """

    def __init__(
        self,
        store: DocumentStore,
        cursor_secret: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        fan_out_factor: int = DEFAULT_FAN_OUT_FACTOR,
    ) -> None:
        """
        Initialize the engine.

        Args:
            store: Record store used for partition queries
            cursor_secret: HMAC key for cursor signing
            page_size: Items per page
            fan_out_factor: Per-partition over-fetch multiple of page_size
        """
        if page_size < 1 or fan_out_factor < 1:
            raise ValueError("page_size and fan_out_factor must be positive")
        self._store = store
        self._secret = cursor_secret
        self.page_size = page_size
        self.fetch_limit = page_size * fan_out_factor

    async def list_documents(
        self,
        status_filter: DocumentStatus | str = ALL_STATUS_FILTER,
        cursor: str | None = None,
    ) -> DocumentPage:
        """
        Return one page of documents, newest first.

        Args:
            status_filter: A DocumentStatus or "all", in any letter case
            cursor: next_cursor from the previous page of the same listing

        Returns:
            DocumentPage: Items and the cursor for the following page, if any

        Raises:
            InvalidCursorError: If the cursor is malformed, tampered or from
                a different listing mode or status
            StoreError: If any partition query fails
            ValueError: If status_filter is not a known status or "all"
        """
        status_filter = status_filter.lower()
        if status_filter == ALL_STATUS_FILTER:
            return await self._list_all(cursor)
        return await self._list_single(DocumentStatus(status_filter), cursor)

    async def _list_single(self, status: DocumentStatus, token: str | None) -> DocumentPage:
        start_key = None
        if token:
            decoded = decode_cursor(token, SINGLE_MODE, self._secret)
            if decoded.status != status:
                raise InvalidCursorError(
                    "cursor was issued for a different status",
                    details={"cursor_status": decoded.status.value, "status": status.value},
                )
            start_key = decoded.start_key

        result = await self._store.query_by_status(
            status, self.page_size, start_key=start_key, descending=True
        )

        next_cursor = None
        if result.next_start_key:
            next_cursor = encode_cursor(
                SinglePartitionCursor(status=status, start_key=result.next_start_key),
                self._secret,
            )

        logger.info(
            "Listed documents for status",
            extra={"status": status.value, "count": len(result.items), "has_more": bool(next_cursor)},
        )
        return DocumentPage(items=result.items, next_cursor=next_cursor)

    async def _list_all(self, token: str | None) -> DocumentPage:
        state = (
            decode_cursor(token, ALL_MODE, self._secret)
            if token
            else AllPartitionCursor(watermark=None)
        )
        partitions = [status for status in ALL_STATUSES if status not in state.exhausted]

        reads = await self._read_partitions(partitions, state)

        candidates = [
            (document, read.status) for read in reads for document in read.candidates
        ]
        candidates.sort(key=lambda pair: sort_key(pair[0]), reverse=True)
        page = candidates[: self.page_size]

        emitted: dict[DocumentStatus, list[Document]] = {}
        for document, status in page:
            emitted.setdefault(status, []).append(document)

        start_keys: dict[DocumentStatus, dict[str, Any]] = {}
        exhausted = set(state.exhausted)
        for read in reads:
            key, done = self._advance(read, emitted.get(read.status, []))
            if done:
                exhausted.add(read.status)
            elif key is not None:
                start_keys[read.status] = key

        items = [document for document, _ in page]
        has_more = len(exhausted) < len(ALL_STATUSES)

        next_cursor = None
        if has_more:
            last = items[-1] if items else None
            next_cursor = encode_cursor(
                AllPartitionCursor(
                    watermark=last.created_at if last else state.watermark,
                    watermark_id=last.document_id if last else state.watermark_id,
                    start_keys=start_keys,
                    exhausted=frozenset(exhausted),
                ),
                self._secret,
            )

        logger.info(
            "Listed documents across all statuses",
            extra={
                "partitions": len(partitions),
                "candidates": len(candidates),
                "count": len(items),
                "has_more": has_more,
            },
        )
        return DocumentPage(items=items, next_cursor=next_cursor)

    async def _read_partitions(
        self,
        partitions: list[DocumentStatus],
        state: AllPartitionCursor,
    ) -> list[_PartitionRead]:
        """
        Query every partition concurrently and wait for all of them.

        No result is used until every query has finished; the first failure
        in status order fails the whole read.
        """
        start_keys = [state.start_keys.get(status) for status in partitions]
        results = await asyncio.gather(
            *(
                self._store.query_by_status(
                    status, self.fetch_limit, start_key=start_key, descending=True
                )
                for status, start_key in zip(partitions, start_keys)
            ),
            return_exceptions=True,
        )

        reads = []
        for status, start_key, result in zip(partitions, start_keys, results):
            if isinstance(result, BaseException):
                logger.error(
                    "Partition query failed",
                    extra={"status": status.value, "error_type": type(result).__name__, "error_msg": str(result)},
                )
                if isinstance(result, ManagementApiError) or not isinstance(result, Exception):
                    raise result
                raise StoreError(
                    f"Failed to fetch documents with status: {status.value}",
                    operation="query",
                    details={"status": status.value, "error": str(result)},
                ) from result

            reads.append(
                _PartitionRead(
                    status=status,
                    start_key=start_key,
                    result=result,
                    candidates=[d for d in result.items if self._after_watermark(d, state)],
                )
            )
        return reads

    @staticmethod
    def _after_watermark(document: Document, state: AllPartitionCursor) -> bool:
        """True when the document sorts strictly after the last emitted item."""
        if state.watermark is None:
            return True
        if state.watermark_id is None:
            return document.created_at < state.watermark
        return sort_key(document) < (state.watermark, state.watermark_id)

    def _advance(
        self,
        read: _PartitionRead,
        emitted: list[Document],
    ) -> tuple[dict[str, Any] | None, bool]:
        """
        Work out where a partition resumes on the next page.

        Walks the read in the store's own order and resumes after the
        longest prefix whose items were all emitted now or on an earlier
        page. Emitted items past that prefix are read again and dropped by
        the watermark, so equal created_at values that a store returns in a
        different order within one read are not skipped.

        Returns:
            tuple: (start key or None to read from the partition's beginning
            or previous position, whether the partition is exhausted)
        """
        emitted_ids = {document.document_id for document in emitted}
        pending_ids = {
            document.document_id
            for document in read.candidates
            if document.document_id not in emitted_ids
        }

        last_seen = None
        for document in read.result.items:
            if document.document_id in pending_ids:
                break
            last_seen = document
        else:
            store_key = read.result.next_start_key
            return store_key, store_key is None

        if last_seen is None:
            return read.start_key, False
        return self._store.start_key_for(last_seen), False
