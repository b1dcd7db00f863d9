"""
Tests for the document store layer (repositories package).

This test suite covers:
- DocumentCollection: save/document/replace/update/remove semantics
- Revision handling and conflict detection
- EdgeCollection: handle validation and immutable endpoints
- DocumentStore: naming, setup and teardown of the resource collections
"""

import pytest

from test_fixtures import FakeDatabase, make_store, write_conflict
from domain.resources import RESOURCES, USERS, USER_MEALS
from repositories import (
    DocumentNotFoundError,
    DocumentStore,
    EdgeCollection,
    InvalidEdgeAttributeError,
    StoreError,
    UniqueConstraintError,
    WriteConflictError,
    setup_collections,
    teardown_collections,
)
from repositories.document_collection import merge_objects


@pytest.fixture
def meals():
    return make_store().collection("meals")


@pytest.fixture
def user_meals():
    return make_store().edge_collection("userMeals")


# =============================================================================
# DOCUMENT COLLECTION
# =============================================================================


def test_save_generates_key_and_metadata(meals):
    """
    Verifies:
    - A key is generated when the payload has none
    - Metadata carries the handle and a revision
    - The payload is stored without system attributes leaking twice
    """
    meta = meals.save({"name": "Pancakes"})

    assert meta["_key"]
    assert meta["_id"] == f"meals/{meta['_key']}"
    assert meta["_rev"]

    stored = meals.document(meta["_key"])
    assert stored == {**meta, "name": "Pancakes"}


def test_save_uses_explicit_key(meals):
    meta = meals.save({"_key": "pancakes", "name": "Pancakes"})
    assert meta["_key"] == "pancakes"
    assert meals.document("pancakes")["name"] == "Pancakes"


def test_save_duplicate_key_raises_unique_constraint(meals):
    meals.save({"_key": "pancakes"})

    with pytest.raises(UniqueConstraintError) as excinfo:
        meals.save({"_key": "pancakes", "name": "Other"})

    assert excinfo.value.error_num == 1210
    assert "pancakes" in excinfo.value.message
    # The original document is untouched
    assert "name" not in meals.document("pancakes")


def test_document_missing_raises_not_found(meals):
    with pytest.raises(DocumentNotFoundError) as excinfo:
        meals.document("doesnotexist")
    assert excinfo.value.error_num == 1202
    assert "meals/doesnotexist" in str(excinfo.value)


def test_all_returns_documents_in_insertion_order(meals):
    assert meals.all() == []
    for name in ("a", "b", "c"):
        meals.save({"_key": name})

    assert [doc["_key"] for doc in meals.all()] == ["a", "b", "c"]
    assert meals.count() == 3


def test_replace_overwrites_whole_document(meals):
    """
    Verifies:
    - Fields missing from the replacement do not survive
    - A new revision is assigned
    """
    first = meals.save({"_key": "m1", "name": "Soup", "spicy": True})

    meta = meals.replace("m1", {"name": "Stew"})

    assert meta["_key"] == "m1"
    assert meta["_rev"] != first["_rev"]
    stored = meals.document("m1")
    assert stored["name"] == "Stew"
    assert "spicy" not in stored
    assert stored["_rev"] == meta["_rev"]


def test_replace_ignores_key_in_payload(meals):
    meals.save({"_key": "m1"})
    meals.replace("m1", {"_key": "other", "_id": "meals/other", "name": "Stew"})

    assert meals.document("m1")["name"] == "Stew"
    with pytest.raises(DocumentNotFoundError):
        meals.document("other")


def test_replace_missing_raises_not_found(meals):
    with pytest.raises(DocumentNotFoundError):
        meals.replace("nope", {"name": "Stew"})


def test_replace_with_stale_revision_conflicts(meals):
    first = meals.save({"_key": "m1", "name": "Soup"})
    meals.replace("m1", {"name": "Stew"})

    with pytest.raises(WriteConflictError) as excinfo:
        meals.replace("m1", {"_rev": first["_rev"], "name": "Chili"})

    assert excinfo.value.error_num == 1200
    assert meals.document("m1")["name"] == "Stew"


def test_replace_with_current_revision_applies(meals):
    meta = meals.save({"_key": "m1", "name": "Soup"})
    meals.replace("m1", {"_rev": meta["_rev"], "name": "Stew"})
    assert meals.document("m1")["name"] == "Stew"


def test_replace_mongo_write_conflict_is_translated(meals):
    meals.save({"_key": "m1"})
    meals._collection.fail_next_write = write_conflict()

    with pytest.raises(WriteConflictError):
        meals.replace("m1", {"name": "Stew"})


def test_update_merges_fields(meals):
    """
    Verifies:
    - Fields not mentioned in the patch are preserved
    - Nested objects are merged recursively
    - Lists are replaced, not concatenated
    """
    meals.save(
        {
            "_key": "m1",
            "name": "Soup",
            "nutrition": {"kcal": 200, "protein_g": 5},
            "tags": ["warm"],
        }
    )

    meals.update("m1", {"nutrition": {"kcal": 250}, "tags": ["cold"], "servings": 2})

    stored = meals.document("m1")
    assert stored["name"] == "Soup"
    assert stored["nutrition"] == {"kcal": 250, "protein_g": 5}
    assert stored["tags"] == ["cold"]
    assert stored["servings"] == 2


def test_update_keeps_explicit_nulls(meals):
    meals.save({"_key": "m1", "note": "salty"})
    meals.update("m1", {"note": None})
    assert meals.document("m1")["note"] is None


def test_update_missing_raises_not_found(meals):
    with pytest.raises(DocumentNotFoundError):
        meals.update("nope", {"name": "x"})


def test_update_with_stale_revision_conflicts(meals):
    first = meals.save({"_key": "m1", "name": "Soup"})
    meals.update("m1", {"name": "Stew"})

    with pytest.raises(WriteConflictError):
        meals.update("m1", {"_rev": first["_rev"], "name": "Chili"})


def test_update_detects_concurrent_modification(meals, monkeypatch):
    """
    Verifies:
    - A document changed between read and write is reported as a conflict
    """
    meals.save({"_key": "m1", "name": "Soup"})
    stale = meals._collection.find_one({"_id": "m1"})
    meals.update("m1", {"name": "Stew"})

    monkeypatch.setattr(meals._collection, "find_one", lambda query, projection=None: dict(stale))

    with pytest.raises(WriteConflictError):
        meals.update("m1", {"name": "Chili"})


def test_remove_deletes_document(meals):
    meta = meals.save({"_key": "m1"})
    removed = meals.remove("m1")

    assert removed == meta
    with pytest.raises(DocumentNotFoundError):
        meals.document("m1")


def test_remove_missing_raises_not_found(meals):
    with pytest.raises(DocumentNotFoundError):
        meals.remove("nope")


def test_truncate_empties_collection(meals):
    meals.save({"_key": "a"})
    meals.save({"_key": "b"})
    assert meals.truncate() == 2
    assert meals.all() == []


def test_store_errors_share_base_class():
    for error in (DocumentNotFoundError, UniqueConstraintError, WriteConflictError):
        assert issubclass(error, StoreError)
    assert str(DocumentNotFoundError()) == "document not found"


def test_merge_objects_does_not_modify_arguments():
    current = {"a": {"b": 1}}
    changes = {"a": {"c": 2}}
    merged = merge_objects(current, changes)

    assert merged == {"a": {"b": 1, "c": 2}}
    assert current == {"a": {"b": 1}}
    assert changes == {"a": {"c": 2}}


def test_merge_objects_replaces_scalar_with_object():
    assert merge_objects({"a": 1}, {"a": {"b": 2}}) == {"a": {"b": 2}}


# =============================================================================
# EDGE COLLECTION
# =============================================================================


def test_edge_save_stores_endpoints(user_meals):
    meta = user_meals.save("users/1", "meals/2", {"_from": "users/1", "_to": "meals/2", "rating": 4})

    stored = user_meals.document(meta["_key"])
    assert stored["_from"] == "users/1"
    assert stored["_to"] == "meals/2"
    assert stored["rating"] == 4


def test_edge_save_does_not_require_existing_endpoints(user_meals):
    meta = user_meals.save("users/ghost", "meals/ghost", {})
    assert user_meals.document(meta["_key"])["_from"] == "users/ghost"


@pytest.mark.parametrize("from_handle", ["users", "users/", "/1", "", None, "users/1/2"])
def test_edge_save_rejects_malformed_handles(user_meals, from_handle):
    with pytest.raises(InvalidEdgeAttributeError) as excinfo:
        user_meals.save(from_handle, "meals/2", {})
    assert excinfo.value.error_num == 1233


def test_edge_replace_keeps_endpoints(user_meals):
    """
    Verifies:
    - Endpoints are fixed at insertion time
    - Replace returns the endpoints along with the new metadata
    """
    meta = user_meals.save("users/1", "meals/2", {"rating": 3})

    replaced = user_meals.replace(meta["_key"], {"_from": "users/9", "_to": "meals/9", "note": "x"})

    assert replaced["_from"] == "users/1"
    assert replaced["_to"] == "meals/2"
    stored = user_meals.document(meta["_key"])
    assert stored["_from"] == "users/1"
    assert stored["_to"] == "meals/2"
    assert stored["note"] == "x"
    assert "rating" not in stored


def test_edge_replace_missing_raises_not_found(user_meals):
    with pytest.raises(DocumentNotFoundError):
        user_meals.replace("nope", {"note": "x"})


def test_edge_update_keeps_endpoints(user_meals):
    meta = user_meals.save("users/1", "meals/2", {"rating": 3})
    user_meals.update(meta["_key"], {"_from": "users/9", "rating": 5})

    stored = user_meals.document(meta["_key"])
    assert stored["_from"] == "users/1"
    assert stored["rating"] == 5


# =============================================================================
# DOCUMENT STORE
# =============================================================================


def test_store_prefixes_collection_names():
    store = DocumentStore(FakeDatabase(), prefix="mealstore_")
    assert store.collection_name("users") == "mealstore_users"
    assert store.collection("users").name == "mealstore_users"
    assert store.for_resource(USERS).handle("1") == "mealstore_users/1"


def test_store_for_resource_is_edge_aware():
    store = make_store()
    assert isinstance(store.for_resource(USER_MEALS), EdgeCollection)
    assert not isinstance(store.for_resource(USERS), EdgeCollection)


def test_setup_collections_creates_all_and_indexes_edges():
    database = FakeDatabase()
    store = DocumentStore(database)

    created = setup_collections(store)

    assert sorted(created) == sorted(resource.collection for resource in RESOURCES)
    assert database["userMeals"].indexes == ["_from", "_to"]
    assert database["mealIngredients"].indexes == ["_from", "_to"]
    assert database["users"].indexes == []


def test_setup_collections_is_idempotent():
    store = make_store()
    setup_collections(store)
    assert setup_collections(store) == []


def test_teardown_drops_all_collections():
    database = FakeDatabase()
    store = DocumentStore(database, prefix="p_")
    setup_collections(store)
    store.collection("meals").save({"_key": "m1"})

    dropped = teardown_collections(store)

    assert len(dropped) == 5
    assert database.list_collection_names() == []
    # Dropping again is a no-op
    assert teardown_collections(store) == []


def test_teardown_truncate_keeps_collections():
    database = FakeDatabase()
    store = DocumentStore(database)
    setup_collections(store)
    store.collection("meals").save({"_key": "m1"})

    teardown_collections(store, truncate=True)

    assert len(database.list_collection_names()) == 5
    assert store.collection("meals").all() == []
