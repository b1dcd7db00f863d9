"""
Resource route template.

``build_resource_router`` turns a ResourceDefinition into an APIRouter with
list, create, detail, replace, update and delete routes. Every route is a
single store call: document-not-found becomes 404, unique-constraint and
write-conflict errors become 409, any other store error propagates.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Path, Request, Response, status

from api.dependencies import get_store
from api.responses import error_responses
from app.exceptions import ConflictError, NotFoundError
from domain.resources import ResourceDefinition
from domain.schemas import (
    Document,
    DocumentChanges,
    NewDocument,
    NewRelation,
    Relation,
)
from repositories import (
    DocumentCollection,
    DocumentNotFoundError,
    DocumentStore,
    UniqueConstraintError,
    WriteConflictError,
)


def build_resource_router(resource: ResourceDefinition) -> APIRouter:
    """Build the CRUD router for one collection"""
    router = APIRouter(prefix=f"/{resource.path}", tags=[resource.label])
    logger = logging.getLogger(f"mealstore.api.{resource.path}")

    document_model = Relation if resource.edge else Document
    new_document_model = NewRelation if resource.edge else NewDocument
    detail_route = f"{resource.path}_detail"
    key_description = f"The key of the {resource.label}"

    def get_collection(store: DocumentStore = Depends(get_store)) -> DocumentCollection:
        return store.for_resource(resource)

    @router.get(
        "",
        response_model=List[document_model],
        name=f"{resource.path}_list",
        summary=f"List all {resource.plural}",
        description=f"Retrieves a list of all {resource.plural}.",
    )
    def list_documents(collection: DocumentCollection = Depends(get_collection)):
        return collection.all()

    @router.post(
        "",
        response_model=document_model,
        status_code=status.HTTP_201_CREATED,
        name=f"{resource.path}_create",
        responses=error_responses(409),
        summary=f"Create a new {resource.label}",
        description=(
            f"Creates a new {resource.label} from the request body and "
            "returns the saved document."
        ),
    )
    def create_document(
        request: Request,
        response: Response,
        body: new_document_model,
        collection: DocumentCollection = Depends(get_collection),
    ):
        document = body.model_dump(by_alias=True, exclude_unset=True)
        try:
            if resource.edge:
                meta = collection.save(document["_from"], document["_to"], document)
            else:
                meta = collection.save(document)
        except UniqueConstraintError as exc:
            raise ConflictError(exc.message) from exc

        document.update(meta)
        response.headers["Location"] = str(
            request.url_for(detail_route, key=document["_key"])
        )
        logger.info("Created %s", meta["_id"])
        return document

    @router.get(
        "/{key}",
        response_model=document_model,
        name=detail_route,
        responses=error_responses(404),
        summary=f"Fetch a {resource.label}",
        description=f"Retrieves a {resource.label} by its key.",
    )
    def get_document(
        key: str = Path(..., description=key_description),
        collection: DocumentCollection = Depends(get_collection),
    ):
        try:
            return collection.document(key)
        except DocumentNotFoundError as exc:
            raise NotFoundError(exc.message) from exc

    @router.put(
        "/{key}",
        response_model=document_model,
        name=f"{resource.path}_replace",
        responses=error_responses(404, 409),
        summary=f"Replace a {resource.label}",
        description=(
            f"Replaces an existing {resource.label} with the request body and "
            "returns the new document."
        ),
    )
    def replace_document(
        body: DocumentChanges,
        key: str = Path(..., description=key_description),
        collection: DocumentCollection = Depends(get_collection),
    ):
        document = body.model_dump(by_alias=True, exclude_unset=True)
        try:
            meta = collection.replace(key, document)
        except DocumentNotFoundError as exc:
            raise NotFoundError(exc.message) from exc
        except WriteConflictError as exc:
            raise ConflictError(exc.message) from exc

        document.update(meta)
        logger.info("Replaced %s", meta["_id"])
        return document

    @router.patch(
        "/{key}",
        response_model=document_model,
        name=f"{resource.path}_update",
        responses=error_responses(404, 409),
        summary=f"Update a {resource.label}",
        description=(
            f"Patches a {resource.label} with the request body and "
            "returns the updated document."
        ),
    )
    def update_document(
        body: DocumentChanges,
        key: str = Path(..., description=key_description),
        collection: DocumentCollection = Depends(get_collection),
    ):
        changes = body.model_dump(by_alias=True, exclude_unset=True)
        try:
            collection.update(key, changes)
            document = collection.document(key)
        except DocumentNotFoundError as exc:
            raise NotFoundError(exc.message) from exc
        except WriteConflictError as exc:
            raise ConflictError(exc.message) from exc

        logger.info("Updated %s", document["_id"])
        return document

    @router.delete(
        "/{key}",
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
        name=f"{resource.path}_delete",
        responses=error_responses(404),
        summary=f"Remove a {resource.label}",
        description=f"Deletes a {resource.label} from the database.",
    )
    def delete_document(
        key: str = Path(..., description=key_description),
        collection: DocumentCollection = Depends(get_collection),
    ):
        try:
            meta = collection.remove(key)
        except DocumentNotFoundError as exc:
            raise NotFoundError(exc.message) from exc

        logger.info("Removed %s", meta["_id"])
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
