import pytest
import sys
import os
from decimal import Decimal

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from storefront.engine import ProductVariant, CustomerClassification, effective_price, to_minor_units

REGULAR = CustomerClassification.REGULAR
RESELLER = CustomerClassification.RESELLER


@pytest.fixture
def variant():
    return ProductVariant(
        id="v-50",
        size_ml=50,
        regular_price=Decimal("450.00"),
        bulk_price=Decimal("380.00"),
        bulk_min_quantity=6,
        stock_quantity=20,
    )


@pytest.mark.parametrize("qty", [1, 5, 6, 100])
@pytest.mark.parametrize("enabled", [True, False])
def test_regular_customer_always_pays_regular_price(variant, qty, enabled):
    """Regular customers never see bulk pricing, whatever the quantity."""
    assert effective_price(variant, qty, REGULAR, enabled) == (Decimal("450.00"), False)


def test_bulk_threshold_is_inclusive(variant):
    """Exactly the minimum quantity qualifies; one below does not."""
    assert effective_price(variant, 6, RESELLER, True) == (Decimal("380.00"), True)
    assert effective_price(variant, 5, RESELLER, True) == (Decimal("450.00"), False)


def test_bulk_disabled_store_switch(variant):
    """Store switch off means regular pricing even for a qualifying reseller."""
    assert effective_price(variant, 50, RESELLER, False) == (Decimal("450.00"), False)


def test_variant_without_bulk_price():
    """No bulk price configured means no bulk pricing at any quantity."""
    v = ProductVariant(id="v-100", size_ml=100, regular_price=Decimal("790.00"), stock_quantity=3)
    assert effective_price(v, 1000, RESELLER, True) == (Decimal("790.00"), False)


def test_free_item_is_legal():
    """A zero regular price is a valid free item."""
    v = ProductVariant(id="tester", size_ml=2, regular_price=Decimal("0"), stock_quantity=10)
    assert effective_price(v, 1, REGULAR, True) == (Decimal("0"), False)


def test_no_variant_is_a_caller_error():
    with pytest.raises(ValueError):
        effective_price(None, 1, REGULAR, True)


def test_engine_does_not_round():
    """Sub-cent prices pass through untouched."""
    v = ProductVariant(id="odd", size_ml=10, regular_price=Decimal("19.995"), stock_quantity=1)
    price, _ = effective_price(v, 1, REGULAR, False)
    assert price == Decimal("19.995")


@pytest.mark.parametrize("amount,expected", [
    (Decimal("450.00"), 45000),
    (Decimal("75.50"), 7550),
    (Decimal("19.995"), 2000),
    (Decimal("19.994"), 1999),
    (Decimal("0.005"), 1),
    (Decimal("0"), 0),
])
def test_minor_units_round_half_away_from_zero(amount, expected):
    assert to_minor_units(amount) == expected
