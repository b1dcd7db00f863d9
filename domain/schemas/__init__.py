"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.document_schemas import (
    KEY_PATTERN,
    HANDLE_PATTERN,
    Document,
    Relation,
    NewDocument,
    NewRelation,
    DocumentChanges,
)

__all__ = [
    "KEY_PATTERN",
    "HANDLE_PATTERN",
    "Document",
    "Relation",
    "NewDocument",
    "NewRelation",
    "DocumentChanges",
]
