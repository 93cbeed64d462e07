"""Engine subpackage - pricing and cart logic, no I/O."""
from .pricing_engine import effective_price, to_minor_units
from .cart import (
    Cart,
    add_variant,
    change_quantity,
    remove_variant,
    reprice,
    build_cart,
    subtotal,
    delivery_cost,
    total,
    item_count,
    to_checkout_payload,
)
from .models import (
    CustomerClassification,
    Product,
    ProductVariant,
    CartLineItem,
    CheckoutLine,
    StoreSettings,
)

__all__ = [
    'effective_price', 'to_minor_units',
    'Cart', 'add_variant', 'change_quantity', 'remove_variant', 'reprice', 'build_cart',
    'subtotal', 'delivery_cost', 'total', 'item_count', 'to_checkout_payload',
    'CustomerClassification', 'Product', 'ProductVariant', 'CartLineItem',
    'CheckoutLine', 'StoreSettings',
]
