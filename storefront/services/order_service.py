# storefront/services/order_service.py
import math
from typing import Any, Dict

from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.domain.errors import AuthenticationRequiredError, OrderNotFoundError
from storefront.repos.order_repo import OrderRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def order_view(order: OrderModel) -> Dict[str, Any]:
    return {
        "id": order.id,
        "user_id": order.user_id,
        "status": order.status,
        "total": order.total,
        "stripe_session_id": order.stripe_session_id,
        "stripe_payment_intent_id": order.stripe_payment_intent_id,
        "version": order.version,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
        "items": [
            {
                "id": i.id,
                "product_id": i.product_id,
                "quantity": i.quantity,
                "price": i.price,
                "product_name": i.product.name if i.product else None,
            }
            for i in order.items
        ],
    }


def order_page(rows, total_count: int, page: int, page_size: int) -> Dict[str, Any]:
    return {
        "orders": [
            {
                "id": order.id,
                "status": order.status,
                "total": order.total,
                "created_at": order.created_at,
                "updated_at": order.updated_at,
                "items_count": items_count,
            }
            for order, items_count in rows
        ],
        "total_count": total_count,
        "total_pages": math.ceil(total_count / page_size) if page_size else 0,
        "current_page": page,
    }


class OrderService:
    """
    Read side of the order ledger for the shopper: history and detail.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)

    def list_user_orders(self, user_id: str | None, page: int = 1, page_size: int = 10) -> Dict[str, Any]:
        if not user_id:
            raise AuthenticationRequiredError("Sign in to see your orders")

        rows, total_count = self.repo.list_orders(user_id=user_id, page=page, page_size=page_size)
        return order_page(rows, total_count, page, page_size)

    def get_order(self, order_id: str, user_id: str | None) -> Dict[str, Any]:
        if not user_id:
            raise AuthenticationRequiredError("Sign in to see your orders")

        order = self.repo.get_order_with_items(order_id)
        if not order:
            raise OrderNotFoundError(order_id)

        if order.user_id != user_id:
            raise PermissionError("No access to this order")

        return order_view(order)
