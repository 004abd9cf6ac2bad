"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory record store, SQLite-backed SQL store, document factory,
object storage mocks
Dependencies: pytest, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock
import uuid

import pytest

from management_api.core.exceptions import StatusConflictError, StoreError
from management_api.models.document import Document, DocumentStatus, StatusQueryResult

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class InMemoryDocumentStore:
    """
    Dict-backed DocumentStore for engine and service tests.

    Pages the same way the SQL store does: ordered by (created_at,
    document_id), continuation key only when more rows remain. Every
    query is recorded in ``queries`` as (status, limit, start_key).
    """

    def __init__(self) -> None:
        self.documents: dict[str, Document] = {}
        self.queries: list[tuple[DocumentStatus, int, dict[str, Any] | None]] = []
        self.failing_statuses: set[DocumentStatus] = set()

    async def put(self, document: Document) -> None:
        self.documents[document.document_id] = document

    async def get(self, document_id: str) -> Document | None:
        return self.documents.get(document_id)

    async def delete(self, document_id: str) -> bool:
        return self.documents.pop(document_id, None) is not None

    async def update(self, document_id: str, **fields: Any) -> Document | None:
        document = self.documents.get(document_id)
        if document is None:
            return None
        updated = document.model_copy(update=fields)
        self.documents[document_id] = updated
        return updated

    async def update_status(
        self,
        document_id: str,
        status: DocumentStatus,
        unless_status: DocumentStatus | None = None,
    ) -> Document | None:
        document = self.documents.get(document_id)
        if document is None:
            return None
        if unless_status is not None and document.status == unless_status:
            raise StatusConflictError(document_id)
        return await self.update(document_id, status=status)

    def start_key_for(self, document: Document) -> dict[str, Any]:
        return {
            "document_id": document.document_id,
            "created_at": document.created_at.isoformat(),
        }

    async def query_by_status(
        self,
        status: DocumentStatus,
        limit: int,
        start_key: dict[str, Any] | None = None,
        descending: bool = True,
    ) -> StatusQueryResult:
        self.queries.append((status, limit, start_key))
        if status in self.failing_statuses:
            raise StoreError(f"partition unavailable: {status.value}", operation="query")

        rows = sorted(
            (d for d in self.documents.values() if d.status == status),
            key=lambda d: (d.created_at, d.document_id),
            reverse=descending,
        )
        if start_key is not None:
            after = (datetime.fromisoformat(start_key["created_at"]), start_key["document_id"])
            if descending:
                rows = [d for d in rows if (d.created_at, d.document_id) < after]
            else:
                rows = [d for d in rows if (d.created_at, d.document_id) > after]

        page = rows[:limit]
        next_key = self.start_key_for(page[-1]) if len(rows) > limit else None
        return StatusQueryResult(items=page, next_start_key=next_key)


class IndexOrderedDocumentStore(InMemoryDocumentStore):
    """
    In-memory store that returns equal created_at values by ascending id.

    Mirrors an index whose order within a timestamp group differs from the
    listing order. Continuation keys resume after the given item in that
    index order.
    """

    async def query_by_status(
        self,
        status: DocumentStatus,
        limit: int,
        start_key: dict[str, Any] | None = None,
        descending: bool = True,
    ) -> StatusQueryResult:
        self.queries.append((status, limit, start_key))

        def position(created_at: datetime, document_id: str) -> tuple[float, str]:
            stamp = created_at.timestamp()
            return (-stamp if descending else stamp, document_id)

        rows = sorted(
            (d for d in self.documents.values() if d.status == status),
            key=lambda d: position(d.created_at, d.document_id),
        )
        if start_key is not None:
            after = position(datetime.fromisoformat(start_key["created_at"]), start_key["document_id"])
            rows = [d for d in rows if position(d.created_at, d.document_id) > after]

        page = rows[:limit]
        next_key = self.start_key_for(page[-1]) if len(rows) > limit else None
        return StatusQueryResult(items=page, next_start_key=next_key)


@pytest.fixture
def memory_store() -> InMemoryDocumentStore:
    """Provide an empty in-memory record store."""
    return InMemoryDocumentStore()


@pytest.fixture
def index_ordered_store() -> IndexOrderedDocumentStore:
    """Provide an in-memory store whose tie order is not the listing order."""
    return IndexOrderedDocumentStore()


@pytest.fixture
def make_document() -> Callable[..., Document]:
    """
    Build Document instances with sensible defaults.

    ``minutes`` offsets created_at from a fixed base time so ordering is
    explicit in each test.
    """

    def _make(
        minutes: int = 0,
        status: DocumentStatus = DocumentStatus.PENDING,
        document_id: str | None = None,
        file_name: str = "report.pdf",
    ) -> Document:
        return Document(
            document_id=document_id or str(uuid.uuid4()),
            file_name=file_name,
            size=1024,
            mimetype="application/pdf",
            created_at=BASE_TIME + timedelta(minutes=minutes),
            status=status,
        )

    return _make


@pytest.fixture
async def sql_engine(tmp_path):
    """
    Create a file-backed SQLite async engine with the schema in place.

    A file database (rather than :memory:) lets concurrent partition
    queries open independent connections.
    """
    from sqlalchemy.ext.asyncio import create_async_engine
    from management_api.boundary.db.connection import create_all_tables

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'documents.db'}")
    await create_all_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def sql_session_factory(sql_engine):
    """Provide a session factory bound to the test engine."""
    from management_api.boundary.db.connection import get_async_session_factory

    return get_async_session_factory(sql_engine)


@pytest.fixture
def sql_store(sql_session_factory):
    """Provide a SQLDocumentStore over the test database."""
    from management_api.boundary.db.document_store import SQLDocumentStore

    return SQLDocumentStore(sql_session_factory)


@pytest.fixture
def mock_object_storage() -> MagicMock:
    """
    Create mock S3DocumentClient for testing.

    Returns:
        MagicMock: Mocked client with async upload/delete methods
    """
    client = MagicMock()
    client.bucket = "test-bucket"
    client.upload_document = AsyncMock(
        side_effect=lambda key, body, content_type: {"key": key, "location": f"s3://test-bucket/{key}", "etag": '"etag"'}
    )
    client.delete_document = AsyncMock(
        side_effect=lambda key: {"key": key, "deleted": True, "version_id": None}
    )
    return client
