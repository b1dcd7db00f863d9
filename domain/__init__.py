"""
Domain layer - Resource definitions and validation schemas.
"""

from domain import resources, schemas

__all__ = ["resources", "schemas"]
