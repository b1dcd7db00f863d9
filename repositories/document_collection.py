"""
Document and edge collections on top of MongoDB.

A stored document keeps its key in Mongo's ``_id`` and its revision in
``_rev``. Clients see ``_key``, an ``_id`` handle of the form
``<collection>/<key>`` and ``_rev``. Every write assigns a new revision.
"""

import copy
import logging
import re
from contextlib import contextmanager
from typing import Any, Dict, List, Mapping, Tuple
from uuid import uuid4

from bson import ObjectId
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, OperationFailure

from domain.schemas.document_schemas import HANDLE_PATTERN
from repositories.errors import (
    StoreError,
    DocumentNotFoundError,
    UniqueConstraintError,
    WriteConflictError,
    InvalidEdgeAttributeError,
)

logger = logging.getLogger("mealstore.store")

# MongoDB server error code for a write that lost a concurrency race
MONGO_WRITE_CONFLICT = 112

SYSTEM_ATTRIBUTES: Tuple[str, ...] = ("_key", "_id", "_rev")

_handle_re = re.compile(HANDLE_PATTERN)


def new_revision() -> str:
    """Opaque revision token, unique per write."""
    return uuid4().hex


def merge_objects(current: Mapping[str, Any], changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``changes`` into ``current``.

    Nested objects are merged; any other value (lists and nulls included)
    replaces the existing one. Neither argument is modified.
    """
    merged = copy.deepcopy(dict(current))
    for name, value in changes.items():
        existing = merged.get(name)
        if isinstance(value, Mapping) and isinstance(existing, Mapping):
            merged[name] = merge_objects(existing, value)
        else:
            merged[name] = copy.deepcopy(value)
    return merged


class DocumentCollection:
    """
    A named set of documents addressed by key.

    Mirrors the classic document-store collection API: ``all``, ``save``,
    ``document``, ``replace``, ``update``, ``remove``. Failures are raised
    as typed ``StoreError`` subclasses.
    """

    # Attributes that are fixed at insertion time and survive replace/update
    immutable_attributes: Tuple[str, ...] = ()

    def __init__(self, collection: Collection):
        self._collection = collection
        self.name = collection.name

    def handle(self, key: str) -> str:
        return f"{self.name}/{key}"

    # ------------------ Helpers ------------------

    def _meta(self, key: str, rev: str) -> Dict[str, Any]:
        return {"_id": self.handle(key), "_key": key, "_rev": rev}

    def _to_client(self, stored: Mapping[str, Any]) -> Dict[str, Any]:
        body = dict(stored)
        key = body.pop("_id")
        document = self._meta(key, body.pop("_rev", None))
        document.update(body)
        return document

    def _writable(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        skipped = SYSTEM_ATTRIBUTES + self.immutable_attributes
        return {name: value for name, value in payload.items() if name not in skipped}

    def _carried_over(self, key: str) -> Dict[str, Any]:
        """Attributes of the stored document a replacement must keep."""
        return {}

    def _not_found(self, key: str) -> DocumentNotFoundError:
        return DocumentNotFoundError(f"document not found: {self.handle(key)}")

    def _missing_or_conflict(self, key: str) -> StoreError:
        """Explain why a guarded write matched nothing."""
        if self._collection.count_documents({"_id": key}, limit=1):
            return WriteConflictError(f"conflict, _rev values do not match: {self.handle(key)}")
        return self._not_found(key)

    @contextmanager
    def _write_errors(self, key: str):
        try:
            yield
        except DuplicateKeyError as exc:
            raise UniqueConstraintError(
                f"unique constraint violated - in index primary of type primary "
                f"over '_key'; conflicting key: {key}"
            ) from exc
        except OperationFailure as exc:
            if exc.code == MONGO_WRITE_CONFLICT:
                raise WriteConflictError(
                    f"conflict, write conflict on {self.handle(key)}"
                ) from exc
            raise

    def _insert(self, document: Mapping[str, Any], body: Dict[str, Any]) -> Dict[str, Any]:
        key = document.get("_key") or str(ObjectId())
        rev = new_revision()
        stored = {"_id": key, "_rev": rev}
        stored.update(body)
        with self._write_errors(key):
            self._collection.insert_one(stored)
        logger.debug("Saved %s (rev %s)", self.handle(key), rev)
        return self._meta(key, rev)

    # ------------------ Operations ------------------

    def all(self) -> List[Dict[str, Any]]:
        """Every document in the collection, in store-native order."""
        return [self._to_client(stored) for stored in self._collection.find()]

    def count(self) -> int:
        return self._collection.count_documents({})

    def save(self, document: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert a new document.

        Uses ``document["_key"]`` when given, otherwise generates a key.

        Returns:
            Metadata of the stored document (``_id``, ``_key``, ``_rev``)

        Raises:
            UniqueConstraintError: a document with that key already exists
        """
        return self._insert(document, self._writable(document))

    def document(self, key: str) -> Dict[str, Any]:
        """Fetch a document by key.

        Raises:
            DocumentNotFoundError: no document has that key
        """
        stored = self._collection.find_one({"_id": key})
        if stored is None:
            raise self._not_found(key)
        return self._to_client(stored)

    def replace(self, key: str, document: Mapping[str, Any]) -> Dict[str, Any]:
        """Overwrite the whole document stored under ``key``.

        Attributes missing from ``document`` are gone afterwards. If
        ``document`` carries ``_rev`` the write only applies to that revision.

        Returns:
            Metadata of the new revision

        Raises:
            DocumentNotFoundError: no document has that key
            WriteConflictError: the stored revision differs from ``_rev``
        """
        expected_rev = document.get("_rev")
        carried = self._carried_over(key)
        rev = new_revision()
        replacement = self._writable(document)
        replacement.update(carried)
        replacement["_rev"] = rev

        query: Dict[str, Any] = {"_id": key}
        if expected_rev is not None:
            query["_rev"] = expected_rev
        with self._write_errors(key):
            result = self._collection.replace_one(query, replacement)
        if result.matched_count == 0:
            raise self._missing_or_conflict(key)

        meta = self._meta(key, rev)
        meta.update(carried)
        return meta

    def update(self, key: str, changes: Mapping[str, Any]) -> Dict[str, Any]:
        """Merge ``changes`` into the document stored under ``key``.

        The write is guarded by the revision that was read, so a document
        modified in between is reported as a conflict instead of being
        silently overwritten.

        Raises:
            DocumentNotFoundError: no document has that key
            WriteConflictError: ``_rev`` is stale or the document changed
                concurrently
        """
        current = self._collection.find_one({"_id": key})
        if current is None:
            raise self._not_found(key)

        current_rev = current.get("_rev")
        expected_rev = changes.get("_rev")
        if expected_rev is not None and expected_rev != current_rev:
            raise WriteConflictError(f"conflict, _rev values do not match: {self.handle(key)}")

        existing = {name: value for name, value in current.items() if name not in ("_id", "_rev")}
        merged = merge_objects(existing, self._writable(changes))
        rev = new_revision()
        merged["_rev"] = rev

        with self._write_errors(key):
            result = self._collection.replace_one({"_id": key, "_rev": current_rev}, merged)
        if result.matched_count == 0:
            raise self._missing_or_conflict(key)
        return self._meta(key, rev)

    def remove(self, key: str) -> Dict[str, Any]:
        """Delete the document stored under ``key``.

        Raises:
            DocumentNotFoundError: no document has that key
        """
        removed = self._collection.find_one_and_delete({"_id": key})
        if removed is None:
            raise self._not_found(key)
        logger.debug("Removed %s", self.handle(key))
        return self._meta(key, removed.get("_rev"))

    def truncate(self) -> int:
        """Remove every document, keeping the collection itself."""
        return self._collection.delete_many({}).deleted_count


class EdgeCollection(DocumentCollection):
    """
    A collection of relations. Each relation links two documents through
    ``_from`` and ``_to`` handles, which are set when the relation is saved
    and never change afterwards. Endpoint existence is not checked.
    """

    immutable_attributes = ("_from", "_to")

    def save(self, from_handle: str, to_handle: str, document: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert a relation from ``from_handle`` to ``to_handle``.

        Raises:
            InvalidEdgeAttributeError: a handle is not ``<collection>/<key>``
            UniqueConstraintError: a relation with that key already exists
        """
        for attribute, handle in (("_from", from_handle), ("_to", to_handle)):
            if not isinstance(handle, str) or not _handle_re.match(handle):
                raise InvalidEdgeAttributeError(f"invalid edge attribute: {attribute}")
        body = self._writable(document)
        body["_from"] = from_handle
        body["_to"] = to_handle
        return self._insert(document, body)

    def _carried_over(self, key: str) -> Dict[str, Any]:
        stored = self._collection.find_one({"_id": key}, {"_from": 1, "_to": 1})
        if stored is None:
            raise self._not_found(key)
        return {attribute: stored.get(attribute) for attribute in self.immutable_attributes}
