"""
Catalog endpoints.

Products, product categories, subcategories and banners share the same
five routes; ``build_catalog_router`` wires them to the lifecycle for one
entity definition. Subcategories also get the rich-text editor upload.
"""
from fastapi import APIRouter, Depends, Request

from brandstore.api.deps import get_lifecycle
from brandstore.api.uploads import FormSubmission, intercept_uploads, store_form
from brandstore.catalog.entities import BANNER, EDITOR_FOLDER, PRODUCT, PRODUCT_CATEGORY, SUBCATEGORY, EntityDefinition
from brandstore.catalog.lifecycle import CatalogLifecycle
from brandstore.core.errors import ValidationFailed
from brandstore.utils.logger import get_logger

logger = get_logger("api.catalog")


def build_catalog_router(entity: EntityDefinition, prefix: str, tag: str) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[tag])
    form = intercept_uploads(entity.folder, list(entity.image_slots))
    form_for_id = intercept_uploads(entity.folder, list(entity.image_slots), int_path_params=["entity_id"])

    @router.post("", status_code=201)
    async def create_entity(
        submission: FormSubmission = Depends(form),
        lifecycle: CatalogLifecycle = Depends(get_lifecycle),
    ):
        result = await lifecycle.create(entity, submission.fields, submission.uploads)
        return {
            "success": True,
            "message": f"{entity.label} added successfully",
            "id": result.id,
            **result.references,
        }

    @router.get("")
    def list_entities(lifecycle: CatalogLifecycle = Depends(get_lifecycle)):
        return {"success": True, "data": lifecycle.list(entity)}

    @router.get("/{entity_id}")
    def get_entity(entity_id: int, lifecycle: CatalogLifecycle = Depends(get_lifecycle)):
        return {"success": True, "data": lifecycle.get(entity, entity_id)}

    @router.put("/{entity_id}")
    async def update_entity(
        entity_id: int,
        submission: FormSubmission = Depends(form_for_id),
        lifecycle: CatalogLifecycle = Depends(get_lifecycle),
    ):
        result = await lifecycle.update(entity, entity_id, submission.fields, submission.uploads)
        return {
            "success": True,
            "message": f"{entity.label} updated successfully",
            "id": result.id,
            **result.references,
        }

    @router.delete("/{entity_id}")
    async def delete_entity(entity_id: int, lifecycle: CatalogLifecycle = Depends(get_lifecycle)):
        result = await lifecycle.delete(entity, entity_id)
        return {
            "success": True,
            "message": f"{entity.label} deleted successfully",
            "id": result.id,
            "failed_objects": result.failed_objects,
        }

    return router


products_router = build_catalog_router(PRODUCT, "/api/products", "products")
product_categories_router = build_catalog_router(PRODUCT_CATEGORY, "/api/product-categories", "product-categories")
subcategories_router = build_catalog_router(SUBCATEGORY, "/api/subcategories", "subcategories")
banners_router = build_catalog_router(BANNER, "/api/banners", "banners")


@subcategories_router.post("/upload-image", status_code=201)
async def upload_editor_image(request: Request):
    """Store an image dropped into the description editor and return its URL."""
    submission = await store_form(request, request.app.state.object_store, EDITOR_FOLDER, ["upload"])
    upload = submission.upload_for("upload")
    if upload is None:
        raise ValidationFailed("No image uploaded")
    logger.info(f"Editor image stored: key={upload.key}")
    return {"uploaded": True, "url": upload.url}


catalog_routers = [products_router, product_categories_router, subcategories_router, banners_router]
