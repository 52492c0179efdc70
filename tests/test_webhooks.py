import json
import logging
from decimal import Decimal

import pytest

from storefront.api.deps import get_payment_gateway
from storefront.data.models import OrderModel
from storefront.main import app
from storefront.services.notification_service import NotificationService, send_order_paid_notification_task
from storefront.services.payment_gateway import StripeGateway
from storefront.services.webhook_service import PaymentWebhookService
from helpers import WEBHOOK_SECRET, session_completed_event, sign_payload

URL = "/webhooks/stripe"


@pytest.fixture
def stripe_client(client):
    app.dependency_overrides[get_payment_gateway] = lambda: StripeGateway(
        api_key="sk_test_dummy", webhook_secret=WEBHOOK_SECRET, app_url="http://shop.test"
    )
    return client


@pytest.fixture
def pending_order(db, make_user):
    user = make_user("Bob")
    order = OrderModel(user_id=user.id, total=Decimal("25.50"), status="pending", stripe_session_id="cs_test_123")
    db.add(order)
    db.commit()
    return order


@pytest.fixture
def sent(monkeypatch):
    calls = []

    def fake_send(user_id, order_id):
        calls.append((user_id, order_id))
        return True

    monkeypatch.setattr(NotificationService, "send_order_paid", staticmethod(fake_send))
    return calls


def post_event(client, payload, signature=None):
    headers = {"Content-Type": "application/json"}
    if signature is not None:
        headers["stripe-signature"] = signature
    return client.post(URL, content=payload, headers=headers)


def reload(db, order):
    db.expire_all()
    return db.get(OrderModel, order.id)


def test_missing_signature_is_rejected(stripe_client, db, pending_order, sent):
    resp = post_event(stripe_client, session_completed_event(pending_order.id))

    assert resp.status_code == 400
    assert reload(db, pending_order).status == "pending"
    assert sent == []


def test_invalid_signature_is_rejected(stripe_client, db, pending_order, sent):
    payload = session_completed_event(pending_order.id)
    resp = post_event(stripe_client, payload, sign_payload(payload, secret="whsec_wrong"))

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Webhook Error"
    assert reload(db, pending_order).status == "pending"
    assert sent == []


def test_tampered_body_is_rejected(stripe_client, db, pending_order):
    payload = session_completed_event(pending_order.id)
    signature = sign_payload(payload)
    tampered = payload.replace("pi_test_123", "pi_evil")

    resp = post_event(stripe_client, tampered, signature)

    assert resp.status_code == 400
    assert reload(db, pending_order).stripe_payment_intent_id is None


def test_session_completed_marks_order_paid(stripe_client, db, pending_order, sent):
    payload = session_completed_event(pending_order.id, payment_intent="pi_abc")

    resp = post_event(stripe_client, payload, sign_payload(payload))

    assert resp.status_code == 200
    assert resp.json() == {"received": True}
    order = reload(db, pending_order)
    assert order.status == "paid"
    assert order.stripe_payment_intent_id == "pi_abc"
    assert sent == [(pending_order.user_id, pending_order.id)]


def test_duplicate_delivery_is_idempotent(stripe_client, db, pending_order, sent):
    payload = session_completed_event(pending_order.id, payment_intent="pi_abc")

    first = post_event(stripe_client, payload, sign_payload(payload))
    second = post_event(stripe_client, payload, sign_payload(payload))

    assert first.status_code == second.status_code == 200
    order = reload(db, pending_order)
    assert order.status == "paid"
    assert order.stripe_payment_intent_id == "pi_abc"
    assert len(sent) == 1


def test_missing_order_reference_is_rejected(stripe_client, db, pending_order, sent):
    payload = session_completed_event(None)

    resp = post_event(stripe_client, payload, sign_payload(payload))

    assert resp.status_code == 400
    assert reload(db, pending_order).status == "pending"
    assert sent == []


def test_unknown_order_is_rejected(stripe_client, sent):
    payload = session_completed_event("no-such-order")

    resp = post_event(stripe_client, payload, sign_payload(payload))

    assert resp.status_code == 400
    assert sent == []


def test_other_event_types_are_acknowledged(stripe_client, db, pending_order, sent):
    payload = session_completed_event(pending_order.id).replace(
        "checkout.session.completed", "payment_intent.created"
    )

    resp = post_event(stripe_client, payload, sign_payload(payload))

    assert resp.status_code == 200
    assert reload(db, pending_order).status == "pending"
    assert sent == []


@pytest.mark.parametrize(
    "body",
    [
        {"type": "checkout.session.completed", "data": {"object": {"metadata": "oops"}}},
        {"type": "checkout.session.completed", "data": {"object": "cs_test_123"}},
        {"type": "checkout.session.completed", "data": ["not", "an", "object"]},
        {"type": "checkout.session.completed", "data": {"object": {"metadata": {"orderId": 42}}}},
    ],
)
def test_malformed_session_is_rejected(stripe_client, db, pending_order, sent, body):
    payload = json.dumps({"id": "evt_bad", "object": "event", **body})

    resp = post_event(stripe_client, payload, sign_payload(payload))

    assert resp.status_code == 400
    assert reload(db, pending_order).status == "pending"
    assert sent == []


def test_expanded_payment_intent_is_stored_by_id(db, pending_order, sent):
    event = json.loads(session_completed_event(pending_order.id))
    event["data"]["object"]["payment_intent"] = {"id": "pi_expanded", "object": "payment_intent"}

    assert PaymentWebhookService(db).handle_event(event) is True
    assert reload(db, pending_order).stripe_payment_intent_id == "pi_expanded"


def test_paid_notification_is_queued_with_order_owner(db, pending_order, monkeypatch):
    queued = []
    monkeypatch.setattr(
        send_order_paid_notification_task, "delay", lambda user_id, order_id: queued.append((user_id, order_id))
    )
    event = json.loads(session_completed_event(pending_order.id))

    assert PaymentWebhookService(db).handle_event(event) is True
    assert queued == [(pending_order.user_id, pending_order.id)]


def test_paid_notification_task_runs_eagerly(pending_order):
    result = send_order_paid_notification_task.delay(pending_order.user_id, pending_order.id)

    assert result.successful()
    assert result.get() == {"user_id": pending_order.user_id, "order_id": pending_order.id, "status": "sent"}


def test_broker_failure_does_not_fail_the_webhook(db, pending_order, monkeypatch, caplog):
    def broken_delay(*args, **kwargs):
        raise ConnectionError("broker unreachable")

    monkeypatch.setattr(send_order_paid_notification_task, "delay", broken_delay)
    event = json.loads(session_completed_event(pending_order.id))

    with caplog.at_level(logging.WARNING):
        assert PaymentWebhookService(db).handle_event(event) is True

    assert reload(db, pending_order).status == "paid"
    assert any("Failed to queue paid notification" in r.getMessage() for r in caplog.records)
