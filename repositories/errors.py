"""
Typed errors raised by the document store.

Each error carries a numeric ``error_num`` so callers can tell the known
failure kinds apart; routes translate the ones they recognise into HTTP
errors and let the rest propagate.
"""

ERROR_CONFLICT = 1200
ERROR_DOCUMENT_NOT_FOUND = 1202
ERROR_UNIQUE_CONSTRAINT_VIOLATED = 1210
ERROR_INVALID_EDGE_ATTRIBUTE = 1233


class StoreError(Exception):
    """Base class for all store-reported failures."""

    error_num = 0
    default_message = "store error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class DocumentNotFoundError(StoreError):
    error_num = ERROR_DOCUMENT_NOT_FOUND
    default_message = "document not found"


class UniqueConstraintError(StoreError):
    error_num = ERROR_UNIQUE_CONSTRAINT_VIOLATED
    default_message = "unique constraint violated"


class WriteConflictError(StoreError):
    error_num = ERROR_CONFLICT
    default_message = "conflict"


class InvalidEdgeAttributeError(StoreError):
    error_num = ERROR_INVALID_EDGE_ATTRIBUTE
    default_message = "invalid edge attribute"
