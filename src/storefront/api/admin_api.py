"""
Admin API - FastAPI router for catalog and store settings management.
"""
import logging
from decimal import Decimal
from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

from ..services.catalog_service import CatalogService
from ..services.settings_service import SettingsService
from . import state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["admin"])


# Pydantic models for API
class VariantInput(BaseModel):
    """A size variant as submitted by the admin form."""
    id: Optional[str] = None
    size_ml: int
    regular_price: Decimal
    bulk_price: Optional[Decimal] = None
    bulk_min_quantity: Optional[int] = None
    stock_quantity: int = 0


class ProductInput(BaseModel):
    """Product fields as submitted by the admin form."""
    name: str
    description: str = ""
    image_url: str = ""
    is_new_arrival: bool = False


class ProductWrite(BaseModel):
    """Request model for creating or updating a product."""
    product: ProductInput
    variants: list[VariantInput] = []


class ValidationResponse(BaseModel):
    """Response model for validation."""
    valid: bool
    errors: list[str]
    warnings: list[str]


# Endpoints

@router.get("/admin/products")
async def list_all_products(catalog: CatalogService = Depends(state.get_catalog_service)):
    """List every product, sold out or not, newest first."""
    return jsonable_encoder([p.to_dict() for p in catalog.list_products()])


@router.post("/admin/products")
async def create_product(body: ProductWrite, catalog: CatalogService = Depends(state.get_catalog_service)):
    """Create a product with its variants."""
    try:
        created = catalog.create_product(
            body.product.model_dump(),
            [v.model_dump() for v in body.variants],
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return jsonable_encoder(created.to_dict())


@router.put("/admin/products/{product_id}")
async def update_product(
    product_id: str,
    body: ProductWrite,
    catalog: CatalogService = Depends(state.get_catalog_service),
):
    """Update a product; its variants are replaced by the submitted list."""
    if not catalog.get_product(product_id):
        raise HTTPException(status_code=404, detail=f"Product '{product_id}' not found")
    try:
        updated = catalog.update_product(
            product_id,
            body.product.model_dump(),
            [v.model_dump() for v in body.variants],
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return jsonable_encoder(updated.to_dict())


@router.delete("/admin/products/{product_id}")
async def delete_product(product_id: str, catalog: CatalogService = Depends(state.get_catalog_service)):
    """Delete a product and its variants."""
    try:
        catalog.delete_product(product_id)
        return {"success": True}
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/admin/products/validate", response_model=ValidationResponse)
async def validate_product(body: ProductWrite, catalog: CatalogService = Depends(state.get_catalog_service)):
    """Validate a product without saving."""
    result = catalog.validate_product(
        body.product.model_dump(),
        [v.model_dump() for v in body.variants],
    )
    return ValidationResponse(valid=result.valid, errors=result.errors, warnings=result.warnings)


@router.put("/admin/settings")
async def update_settings(
    values: Dict[str, str],
    settings_service: SettingsService = Depends(state.get_settings_service),
):
    """Upsert store settings."""
    try:
        settings_service.update(values)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True}


@router.post("/migrate")
async def migrate(catalog: CatalogService = Depends(state.get_catalog_service)):
    """Flag the first products as new arrivals."""
    try:
        updated = catalog.mark_new_arrivals(state.get_app_settings().new_arrivals_count)
    except OSError as e:
        logger.exception("Migration error")
        raise HTTPException(status_code=500, detail="Migration failed") from e
    return {
        "success": True,
        "message": "Migration completed successfully",
        "updated_products": updated,
    }
