"""
Database models package.

Exports:
  - DocumentModel: Document ORM model

Dependencies: sqlalchemy, management_api.boundary.db.base
System role: Database model definitions for domain entities
"""

from management_api.boundary.db.models.document_model import DocumentModel

__all__ = [
    "DocumentModel",
]
