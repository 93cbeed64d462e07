import logging
from decimal import Decimal
from typing import List

from fastapi import Depends, FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from storefront.config.settings import configure_logging
from storefront.engine import (
    CustomerClassification,
    build_cart,
    delivery_cost,
    item_count,
    subtotal,
    to_checkout_payload,
    total,
)
from storefront.engine.models import CheckoutLine
from storefront.services.catalog_service import CatalogService
from storefront.services.checkout_service import CheckoutError, CheckoutService, PAYMENT_FAILED_MESSAGE
from storefront.services.settings_service import SettingsService
from storefront.api.admin_api import router as admin_router
from storefront.api import state

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Storefront API",
    description="Catalog, cart pricing and checkout for the fragrance storefront",
    version="1.0.0"
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include admin API
app.include_router(admin_router)


class QuoteItem(BaseModel):
    variant_id: str
    quantity: int = Field(default=1, ge=1)


class QuoteRequest(BaseModel):
    items: List[QuoteItem]
    customer_type: CustomerClassification = CustomerClassification.REGULAR
    include_delivery: bool = False


class CheckoutItem(BaseModel):
    variant_id: str
    name: str
    size_ml: int
    unit_price: Decimal = Field(ge=0)
    quantity: int = Field(ge=1)
    is_bulk_price: bool = False


class CheckoutRequest(BaseModel):
    items: List[CheckoutItem] = []
    include_delivery: bool = False
    customer_type: CustomerClassification = CustomerClassification.REGULAR


@app.get("/")
async def root():
    return {"status": "online", "message": "Storefront API Active"}


@app.get("/api/products")
async def list_products(
    in_stock: bool = False,
    catalog: CatalogService = Depends(state.get_catalog_service),
):
    try:
        products = catalog.list_products(in_stock_only=in_stock)
        return jsonable_encoder([p.to_dict() for p in products])
    except Exception as e:
        logger.exception("Error fetching products")
        raise HTTPException(status_code=500, detail="Failed to fetch products") from e


@app.get("/api/products/{product_id}")
async def get_product(product_id: str, catalog: CatalogService = Depends(state.get_catalog_service)):
    product = catalog.get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail=f"Product '{product_id}' not found")
    return jsonable_encoder(product.to_dict())


@app.get("/api/settings")
async def get_store_settings(settings_service: SettingsService = Depends(state.get_settings_service)):
    try:
        return settings_service.get_all()
    except Exception as e:
        logger.exception("Error fetching settings")
        raise HTTPException(status_code=500, detail="Failed to fetch settings") from e


@app.post("/api/cart/quote")
async def quote_cart(
    req: QuoteRequest,
    catalog: CatalogService = Depends(state.get_catalog_service),
    settings_service: SettingsService = Depends(state.get_settings_service),
):
    """Price a cart server-side from variant ids and quantities."""
    store_settings = settings_service.get_store_settings()
    cart = build_cart(
        [(item.variant_id, item.quantity) for item in req.items],
        req.customer_type,
        store_settings,
        catalog.list_products(),
    )
    return jsonable_encoder({
        "customer_type": req.customer_type.value,
        "lines": [line.to_dict() for line in to_checkout_payload(cart)],
        "item_count": item_count(cart),
        "subtotal": subtotal(cart),
        "delivery_cost": delivery_cost(req.include_delivery, store_settings),
        "total": total(cart, req.include_delivery, store_settings),
    })


@app.post("/api/create-payment-intent")
async def create_checkout_session(
    req: CheckoutRequest,
    checkout: CheckoutService = Depends(state.get_checkout_service),
):
    if not req.items:
        raise HTTPException(status_code=400, detail="No items provided")

    items = [CheckoutLine(**item.model_dump()) for item in req.items]
    try:
        session = checkout.create_session(items, req.include_delivery, req.customer_type)
    except CheckoutError as e:
        raise HTTPException(status_code=500, detail=PAYMENT_FAILED_MESSAGE) from e
    return {"session_id": session.session_id, "url": session.url}


@app.get("/api/system/status")
async def get_status(catalog: CatalogService = Depends(state.get_catalog_service)):
    settings = state.get_app_settings()
    return {
        "api_active": True,
        "catalog": catalog.get_stats(),
        "checkout_configured": bool(settings.stripe_secret_key),
        "currency": settings.currency,
    }
