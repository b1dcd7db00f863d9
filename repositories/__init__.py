"""
Repositories package - Data access layer over the document store.
"""

from repositories.errors import (
    StoreError,
    DocumentNotFoundError,
    UniqueConstraintError,
    WriteConflictError,
    InvalidEdgeAttributeError,
)
from repositories.document_collection import DocumentCollection, EdgeCollection
from repositories.store import DocumentStore, setup_collections, teardown_collections

__all__ = [
    "StoreError",
    "DocumentNotFoundError",
    "UniqueConstraintError",
    "WriteConflictError",
    "InvalidEdgeAttributeError",
    "DocumentCollection",
    "EdgeCollection",
    "DocumentStore",
    "setup_collections",
    "teardown_collections",
]
