import json
from decimal import Decimal
from types import SimpleNamespace

import pytest
import stripe

from storefront.domain.errors import WebhookVerificationError
from storefront.services.payment_gateway import (
    StripeGateway,
    build_line_items,
    redirect_urls,
    to_minor_units,
)
from helpers import WEBHOOK_SECRET, session_completed_event, sign_payload


def make_order(*lines):
    items = [
        SimpleNamespace(product=SimpleNamespace(name=name, description=None, image=image, price=Decimal(price)), quantity=qty)
        for name, price, qty, image in lines
    ]
    return SimpleNamespace(items=items)


@pytest.fixture
def gateway():
    return StripeGateway(api_key="sk_test_dummy", webhook_secret=WEBHOOK_SECRET, app_url="http://shop.test/")


@pytest.mark.parametrize(
    "amount, cents",
    [("10.00", 1000), ("5.50", 550), ("0.01", 1), ("19.995", 2000), ("0", 0)],
)
def test_to_minor_units(amount, cents):
    assert to_minor_units(Decimal(amount)) == cents


def test_line_items_use_current_product_price():
    order = make_order(("Lamp", "10.00", 2, "https://img.test/lamp.png"), ("Pen", "5.50", 1, None))

    lamp, pen = build_line_items(order, currency="usd")

    assert lamp["quantity"] == 2
    assert lamp["price_data"]["unit_amount"] == 1000
    assert lamp["price_data"]["currency"] == "usd"
    assert lamp["price_data"]["product_data"]["images"] == ["https://img.test/lamp.png"]
    assert pen["price_data"]["unit_amount"] == 550
    assert pen["price_data"]["product_data"]["description"] == ""
    # no image -> no images key at all
    assert "images" not in pen["price_data"]["product_data"]


def test_redirect_urls_carry_session_placeholder():
    urls = redirect_urls("http://shop.test")

    assert urls["success_url"] == "http://shop.test/checkout/success?session_id={CHECKOUT_SESSION_ID}"
    assert urls["cancel_url"] == "http://shop.test/checkout/cancel?session_id={CHECKOUT_SESSION_ID}"


def test_create_checkout_session(gateway, monkeypatch):
    captured = {}

    def fake_create(**kwargs):
        captured.update(kwargs)
        return SimpleNamespace(id="cs_live_1", url="https://checkout.stripe.test/cs_live_1")

    monkeypatch.setattr(stripe.checkout.Session, "create", fake_create)

    session = gateway.create_checkout_session(line_items=[{"quantity": 1}], metadata={"orderId": "o-1"})

    assert (session.id, session.url) == ("cs_live_1", "https://checkout.stripe.test/cs_live_1")
    assert captured["mode"] == "payment"
    assert captured["payment_method_types"] == ["card"]
    assert captured["metadata"] == {"orderId": "o-1"}
    assert captured["api_key"] == "sk_test_dummy"
    assert captured["success_url"].startswith("http://shop.test/checkout/success")


def test_create_checkout_session_propagates_stripe_errors(gateway, monkeypatch):
    def fake_create(**kwargs):
        raise stripe.APIConnectionError("network down")

    monkeypatch.setattr(stripe.checkout.Session, "create", fake_create)

    with pytest.raises(stripe.StripeError):
        gateway.create_checkout_session(line_items=[], metadata={"orderId": "o-1"})


def test_parse_event_accepts_signed_payload(gateway):
    payload = session_completed_event("o-1")

    event = gateway.parse_event(payload.encode("utf-8"), sign_payload(payload))

    assert event == json.loads(payload)


def test_parse_event_rejects_bad_signature(gateway):
    payload = session_completed_event("o-1")

    with pytest.raises(WebhookVerificationError):
        gateway.parse_event(payload.encode("utf-8"), sign_payload(payload, secret="whsec_other"))
    with pytest.raises(WebhookVerificationError):
        gateway.parse_event(payload.encode("utf-8"), "garbage")


def test_parse_event_rejects_stale_signature(gateway):
    payload = session_completed_event("o-1")

    with pytest.raises(WebhookVerificationError):
        gateway.parse_event(payload.encode("utf-8"), sign_payload(payload, timestamp=1_000_000))
