#!/usr/bin/env python3
"""
Drop all MealStore collections. Administrative maintenance only; the
running service never calls this.

Usage:
    python scripts/teardown.py --yes              # Drop the five collections
    python scripts/teardown.py --yes --truncate   # Empty them instead
"""

import sys
import logging
import argparse
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from pymongo.errors import PyMongoError

from adapters import mongo_adapter
from app.config import settings
from repositories import DocumentStore, teardown_collections

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("teardown")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Drop all MealStore collections")
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Confirm the teardown (required, the data is lost)",
    )
    parser.add_argument(
        "--truncate",
        action="store_true",
        help="Remove every document but keep the collections and indexes",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    if not args.yes:
        logger.error("Refusing to tear down without --yes")
        return 2

    try:
        database = mongo_adapter.connect(
            settings.mongo_uri, settings.mongo_db_name, settings.mongo_timeout_ms
        )
    except PyMongoError as exc:
        logger.error(f"✗ Could not connect to MongoDB: {exc}")
        return 1

    try:
        store = DocumentStore(database, prefix=settings.collection_prefix)
        affected = teardown_collections(store, truncate=args.truncate)
        action = "Truncated" if args.truncate else "Dropped"
        logger.info(f"✓ {action} {len(affected)} collections")
        return 0
    except PyMongoError as exc:
        logger.error(f"✗ Teardown failed: {exc}")
        return 1
    finally:
        mongo_adapter.close()


if __name__ == "__main__":
    sys.exit(main())
