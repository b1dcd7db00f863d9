#!/usr/bin/env python3
"""
Create the MealStore collections (users, meals, ingredients, userMeals,
mealIngredients) and the _from/_to indexes of the relation collections.
Safe to run repeatedly.

Usage:
    python scripts/setup_collections.py
"""

import sys
import logging
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from pymongo.errors import PyMongoError

from adapters import mongo_adapter
from app.config import settings
from domain.resources import RESOURCES
from repositories import DocumentStore, setup_collections

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("setup_collections")


def main() -> int:
    """Set up every resource collection"""
    try:
        database = mongo_adapter.connect(
            settings.mongo_uri, settings.mongo_db_name, settings.mongo_timeout_ms
        )
    except PyMongoError as exc:
        logger.error(f"✗ Could not connect to MongoDB: {exc}")
        return 1

    try:
        store = DocumentStore(database, prefix=settings.collection_prefix)
        created = setup_collections(store)
        for resource in RESOURCES:
            name = store.collection_name(resource.collection)
            count = store.for_resource(resource).count()
            marker = "created" if name in created else "exists"
            logger.info(f"✓ {name}: {marker}, {count} documents")
        return 0
    except PyMongoError as exc:
        logger.error(f"✗ Collection setup failed: {exc}")
        return 1
    finally:
        mongo_adapter.close()


if __name__ == "__main__":
    sys.exit(main())
