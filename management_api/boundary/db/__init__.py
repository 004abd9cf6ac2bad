"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, TimestampMixin, UTCDateTime: Model building blocks
  - get_async_engine(), get_async_session_factory(): Async connection management
  - create_all_tables(): Schema initialization
  - DocumentModel: Document ORM model
  - DocumentCRUD, document_crud: CRUD operations
  - SQLDocumentStore: Record store adapter over the documents table

Dependencies: sqlalchemy, management_api.configs
System role: Database adapter providing persistent storage for documents
"""

from management_api.boundary.db.base import Base, TimestampMixin, UTCDateTime
from management_api.boundary.db.connection import (
    create_all_tables,
    get_async_engine,
    get_async_session_factory,
)
from management_api.boundary.db.models import DocumentModel
from management_api.boundary.db.CRUD import BaseCRUD, DocumentCRUD, document_crud
from management_api.boundary.db.document_store import SQLDocumentStore

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UTCDateTime",
    # Connection
    "create_all_tables",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "DocumentModel",
    # CRUD
    "BaseCRUD",
    "DocumentCRUD",
    "document_crud",
    # Store
    "SQLDocumentStore",
]
