"""
Pricing Engine - resolves the unit price for a single cart line.

Bulk pricing is an all-or-nothing threshold on the line quantity:
a reseller buying at least the variant's minimum quantity pays the bulk
price, provided the store has bulk discounts switched on. Everyone else
pays the regular price.
"""
from decimal import Decimal, ROUND_HALF_UP

from .models import CustomerClassification, ProductVariant


def qualifies_for_bulk(
    variant: ProductVariant,
    requested_quantity: int,
    classification: CustomerClassification,
    bulk_discount_enabled: bool,
) -> bool:
    """True when every bulk condition holds for this line."""
    return (
        classification == CustomerClassification.RESELLER
        and variant.bulk_price is not None
        and requested_quantity >= variant.bulk_min_quantity
        and bool(bulk_discount_enabled)
    )


def effective_price(
    variant: ProductVariant,
    requested_quantity: int,
    classification: CustomerClassification,
    bulk_discount_enabled: bool,
) -> tuple[Decimal, bool]:
    """
    Resolve (unit_price, is_bulk_price) for a variant at a line quantity.

    No rounding happens here; see to_minor_units for the money boundary.
    """
    if variant is None:
        raise ValueError("effective_price requires a selected variant")

    if qualifies_for_bulk(variant, requested_quantity, classification, bulk_discount_enabled):
        return variant.bulk_price, True
    return variant.regular_price, False


def to_minor_units(amount: Decimal) -> int:
    """Convert a decimal currency amount to integer cents, half away from zero."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
