"""
Cart Aggregator - the in-session shopping cart.

A Cart is an immutable, insertion-ordered collection of lines keyed by
variant id. Every operation returns a new Cart and leaves its input
untouched, so a UI can keep the previous cart around for free.

Display fields on a line are frozen when the variant is first added.
Price and bulk flag are recomputed from the live variant and live store
settings whenever the quantity changes.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from .models import (
    CartLineItem,
    CheckoutLine,
    CustomerClassification,
    LinePricing,
    LineSnapshot,
    Product,
    ProductVariant,
    StoreSettings,
)
from .pricing_engine import effective_price


@dataclass(frozen=True)
class Cart:
    """Ordered cart lines, at most one per variant."""
    lines: tuple[CartLineItem, ...] = ()

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self):
        return iter(self.lines)

    def get_line(self, variant_id: str) -> Optional[CartLineItem]:
        for line in self.lines:
            if line.variant_id == variant_id:
                return line
        return None

    def __contains__(self, variant_id) -> bool:
        return self.get_line(variant_id) is not None

    @property
    def is_empty(self) -> bool:
        return not self.lines


def _price_line(
    variant: ProductVariant,
    quantity: int,
    classification: CustomerClassification,
    settings: StoreSettings,
) -> LinePricing:
    unit_price, is_bulk = effective_price(
        variant, quantity, classification, settings.bulk_discount_enabled
    )
    return LinePricing(quantity=quantity, unit_price=unit_price, is_bulk_price=is_bulk)


def _replace_line(cart: Cart, updated: CartLineItem) -> Cart:
    return Cart(lines=tuple(
        updated if line.variant_id == updated.variant_id else line
        for line in cart.lines
    ))


def find_variant(
    catalog: Iterable[Product], variant_id: str
) -> tuple[Optional[Product], Optional[ProductVariant]]:
    """Look a variant up in the current catalog."""
    for product in catalog or ():
        variant = product.get_variant(variant_id)
        if variant is not None:
            return product, variant
    return None, None


def add_variant(
    cart: Cart,
    product: Product,
    variant: Optional[ProductVariant],
    classification: CustomerClassification,
    settings: StoreSettings,
) -> Cart:
    """Add one unit of a variant. Sold-out or missing variants are ignored."""
    if variant is None or not variant.in_stock:
        return cart

    existing = cart.get_line(variant.id)
    if existing is not None:
        pricing = _price_line(variant, existing.quantity + 1, classification, settings)
        return _replace_line(cart, existing.with_pricing(pricing))

    snapshot = LineSnapshot(
        variant_id=variant.id,
        product_id=product.id,
        name=product.name,
        size_ml=variant.size_ml,
        image_url=product.image_url,
    )
    line = CartLineItem(snapshot=snapshot, pricing=_price_line(variant, 1, classification, settings))
    return Cart(lines=cart.lines + (line,))


def change_quantity(
    cart: Cart,
    variant_id: str,
    delta: int,
    classification: CustomerClassification,
    settings: StoreSettings,
    catalog: Iterable[Product],
) -> Cart:
    """
    Shift a line's quantity by delta.

    Dropping to zero or below removes the line. Otherwise the line is
    re-priced against the variant as it currently appears in the catalog.
    A variant that has vanished from the catalog leaves the cart unchanged,
    and so does an increment on a variant that has since sold out.
    """
    line = cart.get_line(variant_id)
    if line is None:
        return cart

    new_quantity = line.quantity + delta
    if new_quantity <= 0:
        return remove_variant(cart, variant_id)

    _, variant = find_variant(catalog, variant_id)
    if variant is None:
        return cart
    if delta > 0 and not variant.in_stock:
        return cart

    pricing = _price_line(variant, new_quantity, classification, settings)
    return _replace_line(cart, line.with_pricing(pricing))


def remove_variant(cart: Cart, variant_id: str) -> Cart:
    """Drop a line. Unknown ids are a no-op."""
    if variant_id not in cart:
        return cart
    return Cart(lines=tuple(line for line in cart.lines if line.variant_id != variant_id))


def reprice(
    cart: Cart,
    classification: CustomerClassification,
    settings: StoreSettings,
    catalog: Iterable[Product],
) -> Cart:
    """Re-price every line, e.g. after the customer type toggle changes."""
    catalog = list(catalog or ())
    lines = []
    for line in cart.lines:
        _, variant = find_variant(catalog, line.variant_id)
        if variant is None:
            lines.append(line)
            continue
        lines.append(line.with_pricing(_price_line(variant, line.quantity, classification, settings)))
    return Cart(lines=tuple(lines))


def build_cart(
    requested: Iterable[tuple[str, int]],
    classification: CustomerClassification,
    settings: StoreSettings,
    catalog: Iterable[Product],
) -> Cart:
    """Replay (variant_id, quantity) pairs into a fresh cart, as a client would."""
    catalog = list(catalog or ())
    cart = Cart()
    for variant_id, quantity in requested:
        if quantity <= 0:
            continue
        product, variant = find_variant(catalog, variant_id)
        if variant is None:
            continue
        cart = add_variant(cart, product, variant, classification, settings)
        if quantity > 1:
            cart = change_quantity(cart, variant_id, quantity - 1, classification, settings, catalog)
    return cart


def subtotal(cart: Cart) -> Decimal:
    return sum((line.line_total for line in cart.lines), Decimal("0"))


def delivery_cost(include_delivery: bool, settings: StoreSettings) -> Decimal:
    if not include_delivery:
        return Decimal("0")
    return settings.delivery_cost


def total(cart: Cart, include_delivery: bool, settings: StoreSettings) -> Decimal:
    return subtotal(cart) + delivery_cost(include_delivery, settings)


def item_count(cart: Cart) -> int:
    """Units across all lines, for the cart badge."""
    return sum(line.quantity for line in cart.lines)


def to_checkout_payload(cart: Cart) -> list[CheckoutLine]:
    """Project the cart, in insertion order, for the checkout collaborator."""
    return [
        CheckoutLine(
            variant_id=line.variant_id,
            name=line.name,
            size_ml=line.size_ml,
            unit_price=line.unit_price,
            quantity=line.quantity,
            is_bulk_price=line.is_bulk_price,
        )
        for line in cart.lines
    ]
