# storefront/domain/order_status.py
from enum import Enum


class OrderStatus(str, Enum):
    """
    Order lifecycle.

    pending -> paid is driven by the payment webhook only, failed is set by
    checkout when no payment session could be created. Everything else is an
    admin action and no ordering between states is enforced.
    """

    PENDING = "pending"
    PAID = "paid"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    FAILED = "failed"


class AdminOrderStatus(str, Enum):
    """Statuses an admin may assign by hand."""

    PENDING = OrderStatus.PENDING.value
    PROCESSING = OrderStatus.PROCESSING.value
    SHIPPED = OrderStatus.SHIPPED.value
    DELIVERED = OrderStatus.DELIVERED.value
    CANCELLED = OrderStatus.CANCELLED.value


ADMIN_SETTABLE_STATUSES = frozenset(s.value for s in AdminOrderStatus)
