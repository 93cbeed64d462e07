"""
Cart aggregation tests.

Covers add / change / remove semantics, copy-on-write behavior,
totals with delivery and the checkout payload projection.
"""
import pytest
import sys
import os
from dataclasses import replace
from decimal import Decimal

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from storefront.engine import (
    Cart,
    CustomerClassification,
    Product,
    ProductVariant,
    StoreSettings,
    add_variant,
    build_cart,
    change_quantity,
    delivery_cost,
    item_count,
    remove_variant,
    reprice,
    subtotal,
    to_checkout_payload,
    total,
)

REGULAR = CustomerClassification.REGULAR
RESELLER = CustomerClassification.RESELLER


@pytest.fixture
def bulk_on():
    return StoreSettings.from_mapping({"delivery_cost": "75.50", "bulk_discount_enabled": "true"})


@pytest.fixture
def bulk_off():
    return StoreSettings.from_mapping({"delivery_cost": "75.50", "bulk_discount_enabled": "false"})


@pytest.fixture
def v50():
    return ProductVariant(
        id="me-50", size_ml=50,
        regular_price=Decimal("450.00"), bulk_price=Decimal("380.00"),
        bulk_min_quantity=6, stock_quantity=20,
    )


@pytest.fixture
def v100():
    return ProductVariant(id="me-100", size_ml=100, regular_price=Decimal("100.00"), stock_quantity=5)


@pytest.fixture
def sold_out():
    return ProductVariant(id="me-10", size_ml=10, regular_price=Decimal("99.00"), stock_quantity=0)


@pytest.fixture
def product(v50, v100, sold_out):
    return Product(
        id="p-me", name="Midnight Elegance", description="Amber and oud",
        image_url="https://img/me.jpg", variants=(v50, v100, sold_out),
    )


@pytest.fixture
def catalog(product):
    return [product]


def add_n(cart, product, variant, n, classification, settings):
    for _ in range(n):
        cart = add_variant(cart, product, variant, classification, settings)
    return cart


def test_add_new_variant_creates_line(product, v50, bulk_on):
    cart = add_variant(Cart(), product, v50, REGULAR, bulk_on)
    assert len(cart) == 1
    line = cart.get_line("me-50")
    assert line.quantity == 1
    assert line.unit_price == Decimal("450.00")
    assert line.is_bulk_price is False
    assert line.name == "Midnight Elegance"
    assert line.size_ml == 50
    assert line.image_url == "https://img/me.jpg"
    assert line.product_id == "p-me"


def test_add_same_variant_twice_merges(product, v50, bulk_on):
    """Two adds of one variant give a single line of quantity 2."""
    cart = add_n(Cart(), product, v50, 2, REGULAR, bulk_on)
    assert len(cart) == 1
    assert cart.get_line("me-50").quantity == 2
    assert subtotal(cart) == Decimal("900.00")


def test_add_sold_out_or_missing_variant_is_noop(product, sold_out, bulk_on):
    cart = Cart()
    assert add_variant(cart, product, sold_out, REGULAR, bulk_on) is cart
    assert add_variant(cart, product, None, REGULAR, bulk_on) is cart


def test_add_reprices_at_new_quantity(product, v50, bulk_on):
    """Reseller crossing the bulk minimum flips to bulk pricing."""
    cart = add_n(Cart(), product, v50, 5, RESELLER, bulk_on)
    line = cart.get_line("me-50")
    assert line.unit_price == Decimal("450.00")
    assert line.is_bulk_price is False
    assert subtotal(cart) == Decimal("2250.00")

    cart = add_variant(cart, product, v50, RESELLER, bulk_on)
    line = cart.get_line("me-50")
    assert line.quantity == 6
    assert line.unit_price == Decimal("380.00")
    assert line.is_bulk_price is True
    assert subtotal(cart) == Decimal("2280.00")


def test_bulk_switch_off_forces_regular_pricing(product, v50, v100, catalog, bulk_off):
    cart = add_n(Cart(), product, v50, 10, RESELLER, bulk_off)
    cart = add_variant(cart, product, v100, RESELLER, bulk_off)
    cart = change_quantity(cart, "me-50", 5, RESELLER, bulk_off, catalog)
    assert all(line.is_bulk_price is False for line in cart)
    assert cart.get_line("me-50").unit_price == Decimal("450.00")


def test_change_quantity_reprices_and_can_drop_below_threshold(product, v50, catalog, bulk_on):
    cart = add_n(Cart(), product, v50, 6, RESELLER, bulk_on)
    assert cart.get_line("me-50").is_bulk_price is True

    cart = change_quantity(cart, "me-50", -1, RESELLER, bulk_on, catalog)
    line = cart.get_line("me-50")
    assert line.quantity == 5
    assert line.unit_price == Decimal("450.00")
    assert line.is_bulk_price is False


def test_change_quantity_to_zero_removes_line(product, v50, catalog, bulk_on):
    cart = add_n(Cart(), product, v50, 3, REGULAR, bulk_on)
    cart = change_quantity(cart, "me-50", -3, REGULAR, bulk_on, catalog)
    assert "me-50" not in cart
    assert cart.is_empty


def test_change_quantity_below_zero_removes_line(product, v50, catalog, bulk_on):
    cart = add_variant(Cart(), product, v50, REGULAR, bulk_on)
    cart = change_quantity(cart, "me-50", -10, REGULAR, bulk_on, catalog)
    assert cart.get_line("me-50") is None


def test_change_quantity_unknown_line_is_noop(catalog, bulk_on):
    cart = Cart()
    assert change_quantity(cart, "nope", 1, REGULAR, bulk_on, catalog) is cart


def test_change_quantity_uses_live_catalog_price(product, v50, bulk_on):
    """A price change elsewhere in the session is honored on the next recompute."""
    cart = add_variant(Cart(), product, v50, REGULAR, bulk_on)
    repriced = replace(v50, regular_price=Decimal("500.00"))
    live_catalog = [replace(product, variants=(repriced,))]

    cart = change_quantity(cart, "me-50", 1, REGULAR, bulk_on, live_catalog)
    line = cart.get_line("me-50")
    assert line.quantity == 2
    assert line.unit_price == Decimal("500.00")
    # Display snapshot stays as captured at add time
    assert line.name == "Midnight Elegance"


def test_change_quantity_variant_gone_from_catalog_is_noop(product, v50, bulk_on):
    cart = add_variant(Cart(), product, v50, REGULAR, bulk_on)
    assert change_quantity(cart, "me-50", 1, REGULAR, bulk_on, []) is cart


def test_change_quantity_increment_on_sold_out_variant_is_noop(product, v50, bulk_on):
    """Stock sold out elsewhere in the session blocks further increments."""
    cart = add_variant(Cart(), product, v50, REGULAR, bulk_on)
    live = replace(product, variants=(replace(v50, stock_quantity=0),))

    assert change_quantity(cart, "me-50", 1, REGULAR, bulk_on, [live]) is cart
    assert cart.get_line("me-50").quantity == 1


def test_change_quantity_decrement_on_sold_out_variant_still_applies(product, v50, bulk_on):
    cart = add_variant(Cart(), product, v50, REGULAR, bulk_on)
    cart = change_quantity(cart, "me-50", 2, REGULAR, bulk_on, [product])
    live = replace(product, variants=(replace(v50, stock_quantity=0),))

    reduced = change_quantity(cart, "me-50", -1, REGULAR, bulk_on, [live])
    assert reduced.get_line("me-50").quantity == 2
    assert change_quantity(reduced, "me-50", -2, REGULAR, bulk_on, [live]).is_empty


def test_remove_variant(product, v50, v100, bulk_on):
    cart = add_variant(Cart(), product, v50, REGULAR, bulk_on)
    cart = add_variant(cart, product, v100, REGULAR, bulk_on)
    cart = remove_variant(cart, "me-50")
    assert [line.variant_id for line in cart] == ["me-100"]


def test_remove_absent_variant_leaves_cart_unchanged(product, v50, bulk_on):
    cart = add_variant(Cart(), product, v50, REGULAR, bulk_on)
    assert remove_variant(cart, "ghost") == cart


def test_operations_do_not_mutate_input(product, v50, v100, catalog, bulk_on):
    original = add_variant(Cart(), product, v50, REGULAR, bulk_on)
    snapshot = original.lines

    add_variant(original, product, v50, REGULAR, bulk_on)
    add_variant(original, product, v100, REGULAR, bulk_on)
    change_quantity(original, "me-50", 4, REGULAR, bulk_on, catalog)
    remove_variant(original, "me-50")

    assert original.lines == snapshot
    assert original.get_line("me-50").quantity == 1


def test_subtotal_is_order_independent(product, v50, v100, bulk_on):
    cart = add_n(Cart(), product, v50, 3, REGULAR, bulk_on)
    cart = add_n(cart, product, v100, 2, REGULAR, bulk_on)
    reversed_cart = Cart(lines=tuple(reversed(cart.lines)))
    assert subtotal(cart) == subtotal(reversed_cart) == Decimal("1550.00")


def test_subtotal_has_no_float_drift():
    """Ten lines of 0.10 sum to exactly 1.00."""
    variants = [
        ProductVariant(id=f"s{i}", size_ml=i + 1, regular_price=Decimal("0.10"), stock_quantity=1)
        for i in range(10)
    ]
    p = Product(id="samples", name="Samples", variants=tuple(variants))
    settings = StoreSettings()
    cart = Cart()
    for v in variants:
        cart = add_variant(cart, p, v, REGULAR, settings)
    assert subtotal(cart) == Decimal("1.00")


def test_total_with_delivery(product, v100, bulk_on):
    cart = add_n(Cart(), product, v100, 2, REGULAR, bulk_on)
    assert subtotal(cart) == Decimal("200.00")
    assert delivery_cost(True, bulk_on) == Decimal("75.50")
    assert total(cart, True, bulk_on) == Decimal("275.50")


def test_total_without_delivery(product, v100, bulk_on):
    cart = add_n(Cart(), product, v100, 2, REGULAR, bulk_on)
    assert delivery_cost(False, bulk_on) == Decimal("0")
    assert total(cart, False, bulk_on) == Decimal("200.00")


def test_empty_cart_totals(bulk_on):
    assert subtotal(Cart()) == Decimal("0")
    assert item_count(Cart()) == 0
    assert to_checkout_payload(Cart()) == []


def test_checkout_payload_preserves_insertion_order(product, v50, v100, bulk_on):
    cart = add_variant(Cart(), product, v100, RESELLER, bulk_on)
    cart = add_n(cart, product, v50, 6, RESELLER, bulk_on)

    payload = to_checkout_payload(cart)
    assert [p.variant_id for p in payload] == ["me-100", "me-50"]
    assert payload[1].to_dict() == {
        "variant_id": "me-50",
        "name": "Midnight Elegance",
        "size_ml": 50,
        "unit_price": Decimal("380.00"),
        "quantity": 6,
        "is_bulk_price": True,
    }
    assert item_count(cart) == 7


def test_reprice_on_classification_change(product, v50, catalog, bulk_on):
    cart = add_n(Cart(), product, v50, 6, REGULAR, bulk_on)
    assert cart.get_line("me-50").is_bulk_price is False

    cart = reprice(cart, RESELLER, bulk_on, catalog)
    assert cart.get_line("me-50").unit_price == Decimal("380.00")
    assert cart.get_line("me-50").is_bulk_price is True

    cart = reprice(cart, REGULAR, bulk_on, catalog)
    assert cart.get_line("me-50").unit_price == Decimal("450.00")


def test_build_cart_from_quantities(catalog, bulk_on):
    cart = build_cart([("me-50", 6), ("me-100", 1), ("me-10", 2), ("ghost", 1)], RESELLER, bulk_on, catalog)
    assert [line.variant_id for line in cart] == ["me-50", "me-100"]
    assert cart.get_line("me-50").is_bulk_price is True
    assert subtotal(cart) == Decimal("2380.00")
