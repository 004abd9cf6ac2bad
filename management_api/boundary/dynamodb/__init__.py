"""
DynamoDB boundary modules.

Exports: DynamoDocumentStore
"""

from .document_table import DynamoDocumentStore

__all__ = ["DynamoDocumentStore"]
