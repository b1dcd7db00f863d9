"""
Document store - hands out collections of one MongoDB database and
manages their lifecycle (setup and teardown).
"""

import logging
from typing import Iterable, List

from pymongo.database import Database

from domain.resources import RESOURCES, ResourceDefinition
from repositories.document_collection import DocumentCollection, EdgeCollection

logger = logging.getLogger("mealstore.store")


class DocumentStore:
    """
    Entry point to the stored collections.

    Collection names are local names prefixed with ``prefix`` so several
    deployments can share one database.
    """

    def __init__(self, database: Database, prefix: str = ""):
        self._database = database
        self.prefix = prefix

    def collection_name(self, local_name: str) -> str:
        return f"{self.prefix}{local_name}"

    def collection(self, local_name: str) -> DocumentCollection:
        return DocumentCollection(self._database[self.collection_name(local_name)])

    def edge_collection(self, local_name: str) -> EdgeCollection:
        return EdgeCollection(self._database[self.collection_name(local_name)])

    def for_resource(self, resource: ResourceDefinition) -> DocumentCollection:
        """Collection backing a resource, edge-aware."""
        if resource.edge:
            return self.edge_collection(resource.collection)
        return self.collection(resource.collection)

    def ensure_collection(self, local_name: str, edge: bool = False) -> bool:
        """Create the collection if missing; relation collections get
        indexes on ``_from`` and ``_to``.

        Returns:
            True if the collection was created
        """
        name = self.collection_name(local_name)
        created = False
        if name not in self._database.list_collection_names():
            self._database.create_collection(name)
            created = True
        if edge:
            collection = self._database[name]
            collection.create_index("_from")
            collection.create_index("_to")
        return created

    def drop_collection(self, local_name: str) -> bool:
        """Drop the collection. Returns True if it existed."""
        name = self.collection_name(local_name)
        existed = name in self._database.list_collection_names()
        self._database.drop_collection(name)
        return existed

    def ping(self) -> None:
        """Round-trip to the server; raises a pymongo error when unreachable."""
        self._database.command("ping")


def setup_collections(
    store: DocumentStore, resources: Iterable[ResourceDefinition] = RESOURCES
) -> List[str]:
    """Ensure every resource collection exists. Returns the names created."""
    created = []
    for resource in resources:
        if store.ensure_collection(resource.collection, edge=resource.edge):
            created.append(store.collection_name(resource.collection))
            logger.info("Created collection %s", store.collection_name(resource.collection))
    return created


def teardown_collections(
    store: DocumentStore,
    resources: Iterable[ResourceDefinition] = RESOURCES,
    truncate: bool = False,
) -> List[str]:
    """Drop (or, with ``truncate``, empty) every resource collection.

    Returns:
        Names of the collections that were affected
    """
    affected = []
    for resource in resources:
        name = store.collection_name(resource.collection)
        if truncate:
            removed = store.for_resource(resource).truncate()
            logger.info("Truncated collection %s (%d documents)", name, removed)
            affected.append(name)
        elif store.drop_collection(resource.collection):
            logger.info("Dropped collection %s", name)
            affected.append(name)
    return affected
