from typing import Any, Mapping, Optional


class NotFoundError(Exception):
    """Raised when a requested document does not exist.

    Attributes:
        message: human-readable message (the store's own text when translated)
        details: optional mapping with extra context
        code: machine-readable error code
        http_status: suggested HTTP status code for handlers (404)
    """

    http_status = 404

    def __init__(self, message: str = "Not found", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = "NOT_FOUND"):
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class ConflictError(Exception):
    """Raised when a write collides with existing state (duplicate key, stale revision).

    Attributes are similar to NotFoundError. http_status is 409.
    """

    http_status = 409

    def __init__(self, message: str = "Conflict", details: Optional[Mapping[str, Any]] = None, code: Optional[str] = "CONFLICT"):
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message
