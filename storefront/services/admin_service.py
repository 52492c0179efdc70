# storefront/services/admin_service.py
import math
from typing import Any, Dict

from sqlalchemy.orm import Session

from storefront.data.models.activity_log import ActivityLogModel
from storefront.data.models.user import UserModel
from storefront.domain.errors import (
    AuthenticationRequiredError,
    ConcurrencyConflictError,
    OrderNotFoundError,
)
from storefront.domain.order_status import ADMIN_SETTABLE_STATUSES, OrderStatus
from storefront.repos.activity_repo import ActivityRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.order_service import order_page, order_view
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class AdminService:
    """
    Back-office order management.

    Status changes are not validated against the current status, an admin
    may move an order to any of ADMIN_SETTABLE_STATUSES at any time.
    """

    def __init__(self, db: Session):
        self.db = db
        self.orders = OrderRepo(db)
        self.users = UserRepo(db)
        self.activity = ActivityRepo(db)

    def require_admin(self, user_id: str | None) -> UserModel:
        if not user_id:
            raise AuthenticationRequiredError("Sign in as an admin")

        user = self.users.get_user(user_id)
        if not user or user.role != "admin":
            raise PermissionError("Admin access required")
        return user

    def list_orders(
        self,
        admin_id: str | None,
        status: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> Dict[str, Any]:
        self.require_admin(admin_id)
        rows, total_count = self.orders.list_orders(status=status, page=page, page_size=page_size)
        return order_page(rows, total_count, page, page_size)

    def get_order(self, admin_id: str | None, order_id: str) -> Dict[str, Any]:
        """Any order, regardless of its owner."""
        self.require_admin(admin_id)
        order = self.orders.get_order_with_items(order_id)
        if not order:
            raise OrderNotFoundError(order_id)
        return order_view(order)

    def update_order_status(
        self,
        admin_id: str | None,
        order_id: str,
        status: str,
        expected_version: int | None = None,
    ) -> Dict[str, Any]:
        admin = self.require_admin(admin_id)

        status = OrderStatus(status).value
        if status not in ADMIN_SETTABLE_STATUSES:
            raise ValueError(f"Status {status} cannot be set by an admin")

        order = self.orders.get_order(order_id)
        if not order:
            raise OrderNotFoundError(order_id)
        previous = order.status

        rowcount = self.orders.update_order(order_id, {"status": status}, expected_version=expected_version)
        if rowcount == 0:
            self.orders.rollback()
            raise ConcurrencyConflictError(
                f"Order {order_id} was modified by another operation"
            )
        self.orders.commit()

        logger.info(f"Admin {admin.id} changed order {order_id} status {previous} -> {status}")
        self._log_activity(admin.id, order_id, {"from": previous, "to": status})

        return order_view(self.orders.get_order_with_items(order_id))

    def list_activity(
        self,
        admin_id: str | None,
        user_id: str | None = None,
        action: str | None = None,
        entity_type: str | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> Dict[str, Any]:
        self.require_admin(admin_id)
        entries, total_count = self.activity.list(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            page=page,
            page_size=page_size,
        )
        return {
            "entries": [
                {
                    "id": e.id,
                    "user_id": e.user_id,
                    "action": e.action,
                    "entity_type": e.entity_type,
                    "entity_id": e.entity_id,
                    "details": e.details,
                    "created_at": e.created_at,
                }
                for e in entries
            ],
            "total_count": total_count,
            "total_pages": math.ceil(total_count / page_size) if page_size else 0,
            "current_page": page,
        }

    def _log_activity(self, user_id: str, order_id: str, details: Dict[str, Any]) -> None:
        # the audit trail must not break the update it describes
        try:
            self.activity.add(
                ActivityLogModel(
                    user_id=user_id,
                    action="update_order_status",
                    entity_type="order",
                    entity_id=order_id,
                    details=details,
                )
            )
        except Exception:
            self.db.rollback()
            logger.error(f"Failed to log activity for order {order_id}", exc_info=True)
