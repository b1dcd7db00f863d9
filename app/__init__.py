"""
App package - Application configuration and core utilities.
Contains settings and the HTTP-facing exceptions.
"""

from app.config import settings
from app.exceptions import NotFoundError, ConflictError

__all__ = [
    "settings",
    "NotFoundError",
    "ConflictError",
]
