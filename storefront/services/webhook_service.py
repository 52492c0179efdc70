# storefront/services/webhook_service.py
from typing import Any, Dict

from sqlalchemy.orm import Session

from storefront.domain.errors import OrderNotFoundError, WebhookPayloadError
from storefront.domain.order_status import OrderStatus
from storefront.repos.order_repo import OrderRepo
from storefront.services.notification_service import NotificationService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"


def _as_dict(value: Any, field: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise WebhookPayloadError(f"Malformed event, {field} is not an object")
    return value


def _payment_intent_id(session: Dict[str, Any]) -> str | None:
    # expanded sessions carry the whole payment intent object
    payment_intent = session.get("payment_intent")
    if isinstance(payment_intent, dict):
        return payment_intent.get("id")
    return payment_intent


class PaymentWebhookService:
    """
    Applies verified gateway events to the order ledger.

    Only checkout.session.completed changes anything: the order named in the
    session metadata becomes "paid" with the payment intent id. Delivering
    the same event again re-applies the same values.
    """

    def __init__(self, db: Session, notification_service: NotificationService | None = None):
        self.repo = OrderRepo(db)
        self.notification_service = notification_service or NotificationService()

    def handle_event(self, event: Dict[str, Any]) -> bool:
        """Returns True when the event changed the ledger."""
        event = _as_dict(event, "event")
        event_type = event.get("type")
        if event_type != CHECKOUT_SESSION_COMPLETED:
            logger.info(f"Unhandled event: {event_type}")
            return False

        try:
            data = _as_dict(event.get("data") or {}, "data")
            session = _as_dict(data.get("object") or {}, "data.object")
            metadata = _as_dict(session.get("metadata") or {}, "metadata")
        except WebhookPayloadError as e:
            logger.error(f"{e}, event {event.get('id')}")
            raise

        order_id = metadata.get("orderId")
        if not order_id or not isinstance(order_id, str):
            logger.error(f"No orderId in session metadata, event {event.get('id')}")
            raise WebhookPayloadError("Missing orderId")

        order = self.repo.get_order(order_id)
        if not order:
            logger.error(f"Webhook references unknown order {order_id}, event {event.get('id')}")
            raise OrderNotFoundError(order_id)

        already_paid = order.status == OrderStatus.PAID.value
        self.repo.update_order(
            order_id,
            {
                "status": OrderStatus.PAID.value,
                "stripe_payment_intent_id": _payment_intent_id(session),
            },
        )
        self.repo.commit()
        logger.info(f"Order paid: {order_id}")

        if not already_paid:
            self.notification_service.send_order_paid(order.user_id, order_id)
        return True
