"""
Data models for the pricing engine and cart.

Uses dataclasses for structured, type-safe data representation.
Money is always Decimal; floats never enter the cart.
"""
import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class CustomerClassification(str, Enum):
    """Who is buying. Session-wide, defaults to REGULAR."""
    REGULAR = "regular"
    RESELLER = "reseller"

    @classmethod
    def parse(cls, value) -> 'CustomerClassification':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.REGULAR


@dataclass(frozen=True)
class ProductVariant:
    """One sellable bottle size of a product."""
    id: str
    size_ml: int
    regular_price: Decimal
    bulk_price: Optional[Decimal] = None
    bulk_min_quantity: int = 1
    stock_quantity: int = 0

    @property
    def in_stock(self) -> bool:
        return self.stock_quantity > 0

    @property
    def has_bulk_price(self) -> bool:
        return self.bulk_price is not None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "size_ml": self.size_ml,
            "regular_price": self.regular_price,
            "bulk_price": self.bulk_price,
            "bulk_min_quantity": self.bulk_min_quantity,
            "stock_quantity": self.stock_quantity,
        }


@dataclass(frozen=True)
class Product:
    """A catalog product with its size variants in display order."""
    id: str
    name: str
    description: str = ""
    image_url: str = ""
    variants: tuple[ProductVariant, ...] = ()
    is_new_arrival: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def get_variant(self, variant_id: str) -> Optional[ProductVariant]:
        for variant in self.variants:
            if variant.id == variant_id:
                return variant
        return None

    def available_variants(self) -> list[ProductVariant]:
        """Variants that can still be added to a cart."""
        return [v for v in self.variants if v.in_stock]

    def default_variant(self) -> Optional[ProductVariant]:
        """First in-stock variant, or None when the product is sold out."""
        available = self.available_variants()
        return available[0] if available else None

    @property
    def in_stock(self) -> bool:
        return any(v.in_stock for v in self.variants)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "image_url": self.image_url,
            "is_new_arrival": self.is_new_arrival,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "product_variants": [v.to_dict() for v in self.variants],
        }


@dataclass(frozen=True)
class LineSnapshot:
    """Identity and display fields captured when a variant is first added."""
    variant_id: str
    product_id: str
    name: str
    size_ml: int
    image_url: str = ""


@dataclass(frozen=True)
class LinePricing:
    """Monetary fields, recomputed from the live variant on every change."""
    quantity: int
    unit_price: Decimal
    is_bulk_price: bool = False

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class CartLineItem:
    """A single cart line: frozen snapshot plus recomputed pricing."""
    snapshot: LineSnapshot
    pricing: LinePricing

    @property
    def variant_id(self) -> str:
        return self.snapshot.variant_id

    @property
    def product_id(self) -> str:
        return self.snapshot.product_id

    @property
    def name(self) -> str:
        return self.snapshot.name

    @property
    def size_ml(self) -> int:
        return self.snapshot.size_ml

    @property
    def image_url(self) -> str:
        return self.snapshot.image_url

    @property
    def quantity(self) -> int:
        return self.pricing.quantity

    @property
    def unit_price(self) -> Decimal:
        return self.pricing.unit_price

    @property
    def is_bulk_price(self) -> bool:
        return self.pricing.is_bulk_price

    @property
    def line_total(self) -> Decimal:
        return self.pricing.line_total

    def with_pricing(self, pricing: LinePricing) -> 'CartLineItem':
        return replace(self, pricing=pricing)


@dataclass(frozen=True)
class CheckoutLine:
    """One entry of the payload handed to the checkout collaborator."""
    variant_id: str
    name: str
    size_ml: int
    unit_price: Decimal
    quantity: int
    is_bulk_price: bool

    def to_dict(self) -> dict:
        return {
            "variant_id": self.variant_id,
            "name": self.name,
            "size_ml": self.size_ml,
            "unit_price": self.unit_price,
            "quantity": self.quantity,
            "is_bulk_price": self.is_bulk_price,
        }


def parse_decimal(value, default: Optional[Decimal] = Decimal("0")) -> Optional[Decimal]:
    """Parse a money value; None, blanks and garbage fall back to default."""
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    try:
        text = str(value).strip()
        if not text:
            return default
        parsed = Decimal(text)
    except (InvalidOperation, ValueError):
        return default
    if not parsed.is_finite():
        return default
    return parsed


@dataclass(frozen=True)
class StoreSettings:
    """
    Flat key -> string store settings.

    Owned by the settings store; the cart only reads it. Typed accessors
    never raise: a malformed value falls back to the safe default
    (no delivery charge, bulk discount off).
    """
    values: dict = field(default_factory=dict)

    DELIVERY_COST = "delivery_cost"
    BULK_DISCOUNT_ENABLED = "bulk_discount_enabled"

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.values.get(key, default)

    @property
    def delivery_cost(self) -> Decimal:
        raw = self.values.get(self.DELIVERY_COST)
        cost = parse_decimal(raw, default=Decimal("-1"))
        if cost < 0:
            if raw not in (None, ""):
                logger.warning("Malformed delivery_cost %r, using 0", raw)
            return Decimal("0")
        return cost

    @property
    def bulk_discount_enabled(self) -> bool:
        return self.values.get(self.BULK_DISCOUNT_ENABLED) == "true"

    @classmethod
    def from_mapping(cls, mapping: Optional[dict]) -> 'StoreSettings':
        return cls(values={str(k): str(v) for k, v in (mapping or {}).items() if v is not None})
