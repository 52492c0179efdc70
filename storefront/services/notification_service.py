# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Order notifications, processed asynchronously by Celery.
    """

    @staticmethod
    def send_order_paid(user_id: str | None, order_id: str) -> bool:
        """
        Queues the "order paid" notification. A broker problem is logged and
        does not fail the caller, the order is already paid at this point.
        """
        try:
            send_order_paid_notification_task.delay(user_id, order_id)
            return True
        except Exception as e:
            logger.warning(f"Failed to queue paid notification for order {order_id}: {e}")
            return False


@celery_app.task(name="storefront.services.notification_service.send_order_paid_notification_task")
def send_order_paid_notification_task(user_id: str | None, order_id: str):
    """
    Would send email/push in production; logs for now.
    """
    logger.info(f"[NOTIFICATION] User {user_id or 'guest'}: order {order_id} has been paid")
    return {"user_id": user_id, "order_id": order_id, "status": "sent"}
