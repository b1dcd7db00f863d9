"""
Centralized dependency injection for FastAPI.
Tests swap the store through ``app.dependency_overrides[get_store]``.
"""

from adapters import mongo_adapter
from app.config import settings
from repositories import DocumentStore


def get_store() -> DocumentStore:
    """Document store bound to the shared MongoDB database"""
    return DocumentStore(mongo_adapter.get_database(), prefix=settings.collection_prefix)
