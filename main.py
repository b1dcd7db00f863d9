"""
MealStore FastAPI Application
Main entry point: configuration, middleware, exception handlers and the
five resource routers (users, meals, ingredients, usermeals, mealingredients).
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import uvicorn
from contextlib import asynccontextmanager
import anyio
from typing import Optional

from pymongo.errors import PyMongoError

# Import routes
from api.routes import users, meals, ingredients, usermeals, mealingredients, health

# Import database adapter and store
from adapters import mongo_adapter
from repositories import DocumentStore, setup_collections

# Import configuration
from app.config import settings

# Import middleware
from api.middleware import (
    RequestLoggingMiddleware,
    validation_exception_handler,
    http_exception_handler,
    not_found_exception_handler,
    conflict_exception_handler,
    general_exception_handler,
)
from app.exceptions import NotFoundError, ConflictError

# Setup logging with configured level and format
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()), format=settings.log_format
)
_logger = logging.getLogger("mealstore.main")


def init_store():
    """Connect to MongoDB and make sure every resource collection exists."""
    database = mongo_adapter.connect(
        settings.mongo_uri, settings.mongo_db_name, settings.mongo_timeout_ms
    )
    created = setup_collections(
        DocumentStore(database, prefix=settings.collection_prefix)
    )
    if created:
        _logger.info("Created collections: %s", ", ".join(created))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup and shutdown.
    Connects to MongoDB and sets up collections with retries (best-effort:
    collections are also created implicitly on first write).
    """
    last_exc: Optional[Exception] = None

    _logger.info(f"Starting MealStore in {settings.environment.value} mode")

    for attempt in range(1, settings.db_init_attempts + 1):
        try:
            # Run blocking init in a thread to avoid blocking the event loop
            await anyio.to_thread.run_sync(init_store)
            _logger.info("Document store initialization succeeded")
            break
        except PyMongoError as exc:
            last_exc = exc
            _logger.warning(
                "Document store init attempt %d/%d failed: %s",
                attempt,
                settings.db_init_attempts,
                exc,
            )
            if attempt < settings.db_init_attempts:
                await anyio.sleep(settings.db_init_delay_sec)
    else:
        _logger.error(
            "Document store initialization failed after %d attempts; continuing: %s",
            settings.db_init_attempts,
            last_exc,
        )

    try:
        yield
    finally:
        _logger.info("Shutting down MealStore")
        mongo_adapter.close()


# Create FastAPI application
app = FastAPI(
    title=settings.api_title,
    version=settings.app_version,
    description=settings.api_description,
    lifespan=lifespan,
    debug=settings.debug,
    openapi_url=(
        f"{settings.api_prefix}/openapi.json" if not settings.is_production() else None
    ),
    docs_url=f"{settings.api_prefix}/docs" if not settings.is_production() else None,
    redoc_url=f"{settings.api_prefix}/redoc" if not settings.is_production() else None,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add request logging middleware
app.add_middleware(RequestLoggingMiddleware)

# Register exception handlers
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(NotFoundError, not_found_exception_handler)
app.add_exception_handler(ConflictError, conflict_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# Include resource routers
app.include_router(users.router, prefix=settings.api_prefix)
app.include_router(meals.router, prefix=settings.api_prefix)
app.include_router(ingredients.router, prefix=settings.api_prefix)
app.include_router(usermeals.router, prefix=settings.api_prefix)
app.include_router(mealingredients.router, prefix=settings.api_prefix)
app.include_router(health.router, prefix=settings.api_prefix)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development(),
        log_level=settings.log_level.lower(),
    )
