# storefront/services/payment_gateway.py
"""
Payment gateway adapter.

The checkout and webhook services only see the ``PaymentGateway`` protocol;
``StripeGateway`` is the production implementation backed by the ``stripe``
library (hosted Checkout Sessions and signed webhooks).
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Protocol

import stripe

from storefront.data.models.order import OrderModel
from storefront.domain.errors import WebhookVerificationError
from storefront.utils.settings import (
    APP_URL,
    CURRENCY,
    STRIPE_SECRET_KEY,
    STRIPE_WEBHOOK_SECRET,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# stripe substitutes the real id on redirect
SESSION_ID_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"


@dataclass(frozen=True)
class CheckoutSession:
    id: Optional[str]
    url: Optional[str]


class PaymentGateway(Protocol):
    def create_checkout_session(
        self,
        line_items: List[Dict[str, Any]],
        metadata: Dict[str, str],
    ) -> CheckoutSession:
        ...

    def parse_event(self, payload: bytes, signature: str) -> Dict[str, Any]:
        ...


def to_minor_units(amount: Decimal) -> int:
    """Decimal price -> integer cents."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def build_line_items(order: OrderModel, currency: str = CURRENCY) -> List[Dict[str, Any]]:
    """
    Line items for a hosted checkout session.

    Each line is priced from the product's price at the moment of the call,
    not from the order item snapshot.
    """
    line_items = []
    for item in order.items:
        product = item.product
        product_data: Dict[str, Any] = {
            "name": product.name,
            "description": product.description or "",
        }
        if product.image:
            product_data["images"] = [product.image]

        line_items.append(
            {
                "price_data": {
                    "currency": currency,
                    "product_data": product_data,
                    "unit_amount": to_minor_units(product.price),
                },
                "quantity": item.quantity,
            }
        )
    return line_items


def redirect_urls(app_url: str = APP_URL) -> Dict[str, str]:
    return {
        "success_url": f"{app_url}/checkout/success?session_id={SESSION_ID_PLACEHOLDER}",
        "cancel_url": f"{app_url}/checkout/cancel?session_id={SESSION_ID_PLACEHOLDER}",
    }


class StripeGateway:
    def __init__(
        self,
        api_key: str | None = None,
        webhook_secret: str | None = None,
        app_url: str | None = None,
    ):
        self.api_key = api_key or STRIPE_SECRET_KEY
        self.webhook_secret = webhook_secret or STRIPE_WEBHOOK_SECRET
        self.app_url = (app_url or APP_URL).rstrip("/")

    def create_checkout_session(
        self,
        line_items: List[Dict[str, Any]],
        metadata: Dict[str, str],
    ) -> CheckoutSession:
        logger.info(f"Creating Stripe checkout session for {metadata}")
        try:
            session = stripe.checkout.Session.create(
                api_key=self.api_key,
                mode="payment",
                payment_method_types=["card"],
                line_items=line_items,
                metadata=metadata,
                **redirect_urls(self.app_url),
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe checkout session creation failed: {e}", exc_info=True)
            raise

        return CheckoutSession(id=getattr(session, "id", None), url=getattr(session, "url", None))

    def parse_event(self, payload: bytes, signature: str) -> Dict[str, Any]:
        """
        Verifies the stripe-signature header and returns the event as a dict.
        Any verification or decoding problem -> WebhookVerificationError.
        """
        try:
            event = stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as e:
            raise WebhookVerificationError(f"Invalid signature: {e}") from e
        except ValueError as e:
            raise WebhookVerificationError(f"Invalid payload: {e}") from e

        return event.to_dict()
