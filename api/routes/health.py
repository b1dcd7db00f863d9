"""Health check routes"""

from fastapi import APIRouter, Depends
import logging

from pymongo.errors import PyMongoError

from api.dependencies import get_store
from api.responses import HealthResponse
from app.config import settings
from repositories import DocumentStore

router = APIRouter(tags=["Health"])
logger = logging.getLogger("mealstore.api.health")


@router.get("/health-check", response_model=HealthResponse)
def health_check(store: DocumentStore = Depends(get_store)):
    """Basic health check; reports whether the document store answers."""
    try:
        store.ping()
        database = "ok"
    except PyMongoError as exc:
        logger.warning("Document store unreachable: %s", exc)
        database = "unavailable"
    return {
        "status": "ok",
        "service": settings.app_name,
        "version": settings.app_version,
        "database": database,
    }
