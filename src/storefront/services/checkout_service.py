"""
Checkout Service - creates hosted payment sessions for a priced cart.

Sessions are opened through the Stripe SDK. The cart payload is
forwarded verbatim; only the delivery charge is looked up server-side,
from the settings store. Failures are not retried.
"""
import json
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

import stripe

from ..config.settings import Settings, get_settings
from ..engine.models import CheckoutLine, CustomerClassification
from ..engine.pricing_engine import to_minor_units
from .settings_service import SettingsService

logger = logging.getLogger(__name__)

PAYMENT_FAILED_MESSAGE = "Payment failed. Please try again."


class CheckoutError(Exception):
    """The payment processor could not create a checkout session."""

    def __init__(self, detail: str = ""):
        super().__init__(PAYMENT_FAILED_MESSAGE)
        self.detail = detail


@dataclass
class CheckoutSession:
    """Opaque session handle returned by the processor."""
    session_id: str
    url: Optional[str] = None


class CheckoutService:
    """Builds processor line items and opens a hosted checkout session."""

    def __init__(
        self,
        settings_service: SettingsService,
        settings: Optional[Settings] = None,
        client: Optional[stripe.StripeClient] = None,
    ):
        self.settings = settings or get_settings()
        self.settings_service = settings_service
        self._client = client

    @property
    def client(self) -> stripe.StripeClient:
        """Stripe client, built on first use from the configured secret key."""
        if self._client is None:
            self._client = stripe.StripeClient(
                self.settings.stripe_secret_key,
                base_addresses={"api": self.settings.stripe_api_base},
                http_client=stripe.RequestsClient(timeout=self.settings.request_timeout),
                max_network_retries=0,
            )
        return self._client

    def build_line_items(self, items: list[CheckoutLine], delivery_cost: Decimal) -> list[dict]:
        """Processor line items: one per cart line, plus delivery when charged."""
        currency = self.settings.currency
        line_items = []
        for item in items:
            name = f"{item.name} ({item.size_ml}ml)"
            if item.is_bulk_price:
                name += " - Bulk Price"
            line_items.append({
                "price_data": {
                    "currency": currency,
                    "product_data": {"name": name},
                    "unit_amount": to_minor_units(item.unit_price),
                },
                "quantity": item.quantity,
            })

        if delivery_cost > 0:
            line_items.append({
                "price_data": {
                    "currency": currency,
                    "product_data": {"name": "Delivery Service"},
                    "unit_amount": to_minor_units(delivery_cost),
                },
                "quantity": 1,
            })
        return line_items

    def build_session_params(
        self,
        items: list[CheckoutLine],
        include_delivery: bool,
        classification: CustomerClassification,
    ) -> dict:
        """Full parameter set for the create-session call."""
        store_settings = self.settings_service.get_store_settings()
        delivery = store_settings.delivery_cost if include_delivery else Decimal("0")
        subtotal = sum((item.unit_price * item.quantity for item in items), Decimal("0"))
        base_url = self.settings.public_base_url

        order_items = [
            {
                "variantId": item.variant_id,
                "name": item.name,
                "size": item.size_ml,
                "quantity": item.quantity,
                "price": str(item.unit_price),
                "isBulkPrice": item.is_bulk_price,
            }
            for item in items
        ]

        return {
            "payment_method_types": ["card"],
            "line_items": self.build_line_items(items, delivery),
            "mode": "payment",
            "locale": "en",
            "success_url": f"{base_url}/success?session_id={{CHECKOUT_SESSION_ID}}",
            "cancel_url": f"{base_url}?canceled=true",
            "billing_address_collection": "required",
            "shipping_address_collection": {
                "allowed_countries": list(self.settings.shipping_countries),
            },
            "metadata": {
                "customer_type": CustomerClassification.parse(classification).value,
                "includes_delivery": "true" if include_delivery else "false",
                "delivery_cost": str(delivery),
                "subtotal": str(subtotal),
                "order_items": json.dumps(order_items),
            },
        }

    def create_session(
        self,
        items: list[CheckoutLine],
        include_delivery: bool = False,
        classification: CustomerClassification = CustomerClassification.REGULAR,
    ) -> CheckoutSession:
        """
        Create a hosted checkout session.

        Raises ValueError for an empty cart and CheckoutError for anything
        the processor or the network rejects.
        """
        if not items:
            raise ValueError("No items provided")

        params = self.build_session_params(items, include_delivery, classification)

        try:
            session = self.client.checkout.sessions.create(params=params)
        except stripe.StripeError as e:
            logger.exception("Error creating checkout session")
            raise CheckoutError(str(e)) from e

        session_id = getattr(session, "id", None)
        if not session_id:
            logger.error("Checkout response missing session id: %s", session)
            raise CheckoutError("missing session id")

        logger.info("Created checkout session %s for %d lines", session_id, len(items))
        return CheckoutSession(session_id=session_id, url=getattr(session, "url", None))
