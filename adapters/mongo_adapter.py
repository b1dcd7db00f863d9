"""MongoDB adapter - connection lifecycle for the document store.
"""

from typing import Optional
import logging

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from app.config import settings

logger = logging.getLogger("mealstore.mongo")

_client: Optional[MongoClient] = None
_db: Optional[Database] = None


# ------------------ Connection ------------------
def _new_client(uri: str, timeout_ms: int) -> MongoClient:
    return MongoClient(uri, serverSelectionTimeoutMS=timeout_ms)


def connect(uri: str, db_name: str = "mealstore", timeout_ms: int = 5000) -> Database:
    """Open a client, verify the server answers and make it the shared one.

    Raises:
        PyMongoError: the server could not be reached
    """
    global _client, _db
    client = _new_client(uri, timeout_ms)
    try:
        client.admin.command("ping")
    except PyMongoError:
        client.close()
        raise
    close()
    _client = client
    _db = client[db_name]
    logger.info("Connected to MongoDB %s (database: %s)", uri, db_name)
    return _db


def get_database() -> Database:
    """Shared database handle; lazily creates a client from settings.

    The client connects on first use, so this never blocks.
    """
    global _client, _db
    if _db is not None:
        return _db
    _client = _new_client(settings.mongo_uri, settings.mongo_timeout_ms)
    _db = _client[settings.mongo_db_name]
    logger.info("Created lazy MongoDB client for database %s", settings.mongo_db_name)
    return _db


def close():
    """Close MongoDB connection."""
    global _client, _db
    try:
        if _client is not None:
            _client.close()
            logger.info("MongoDB client closed")
    except PyMongoError:
        logger.exception("Error closing MongoDB client")
    finally:
        _client = None
        _db = None
