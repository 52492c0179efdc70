# storefront/services/checkout_service.py
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.errors import (
    AuthenticationRequiredError,
    CartEmptyError,
    CheckoutInProgressError,
    PaymentSessionError,
)
from storefront.domain.identity import CartIdentity
from storefront.domain.order_status import OrderStatus
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.services.lock_service import LockService
from storefront.services.order_service import order_view
from storefront.services.payment_gateway import PaymentGateway, build_line_items
from storefront.utils.settings import CHECKOUT_LOCK_TTL_SECONDS, CHECKOUT_REQUIRE_AUTH
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CheckoutResult:
    order: Dict[str, Any]
    session_url: str


class CheckoutService:
    """
    Turns a cart into an order and starts payment.

    1. one transaction: order (no status yet) + frozen items + cart deletion
    2. after commit: hosted payment session at the gateway
    3. order gets the session id and status "pending"

    The local commit happens before the irrevocable gateway call. If the
    gateway call fails the order is marked "failed" by a separate write and
    the original error is re-raised.
    """

    def __init__(
        self,
        db: Session,
        gateway: PaymentGateway,
        lock_service: LockService,
        require_auth: bool = CHECKOUT_REQUIRE_AUTH,
        lock_ttl: int = CHECKOUT_LOCK_TTL_SECONDS,
    ):
        self.db = db
        self.carts = CartRepo(db)
        self.orders = OrderRepo(db)
        self.gateway = gateway
        self.lock_service = lock_service
        self.require_auth = require_auth
        self.lock_ttl = lock_ttl

    def process_checkout(self, identity: CartIdentity) -> CheckoutResult:
        cart = self.carts.get_cart(identity.cart_id) if identity.cart_id else None
        if not cart or not cart.items:
            raise CartEmptyError()

        if self.require_auth and not identity.user_id:
            raise AuthenticationRequiredError()

        token = self.lock_service.acquire_checkout_lock(cart.id, ttl=self.lock_ttl)
        if not token:
            raise CheckoutInProgressError(cart.id)

        try:
            order_id = self._create_order(cart.id, identity.user_id)
            return self._start_payment(order_id)
        finally:
            try:
                self.lock_service.release_checkout_lock(cart.id, token)
            except Exception as e:
                # the lock expires on its own after lock_ttl
                logger.warning(f"Failed to release checkout lock for cart {cart.id}: {e}")

    def _create_order(self, cart_id: str, user_id: str | None) -> str:
        """Single transaction, all or nothing. Returns the committed order id."""
        try:
            # re-read under the lock, prices are the products' current prices
            cart = self.carts.get_cart(cart_id)
            if not cart or not cart.items:
                raise CartEmptyError()

            total = sum(
                (item.product.price * item.quantity for item in cart.items),
                Decimal("0.00"),
            )

            order = self.orders.add_order(OrderModel(user_id=user_id, total=total, status=None))
            self.orders.add_items(
                [
                    OrderItemModel(
                        order_id=order.id,
                        product_id=item.product_id,
                        quantity=item.quantity,
                        price=item.product.price,
                    )
                    for item in cart.items
                ]
            )
            self.carts.delete_cart(cart.id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Order {order.id} created from cart {cart_id}, total {total}")
        return order.id

    def _start_payment(self, order_id: str) -> CheckoutResult:
        order = self.orders.get_order_with_items(order_id)

        try:
            session = self.gateway.create_checkout_session(
                line_items=build_line_items(order),
                metadata={"orderId": order.id},
            )
            if not session or not session.id or not session.url:
                raise PaymentSessionError()
        except Exception as e:
            logger.error(f"Payment session for order {order_id} failed: {e}", exc_info=True)
            self._mark_failed(order_id)
            raise

        self.orders.update_order(
            order_id,
            {"stripe_session_id": session.id, "status": OrderStatus.PENDING.value},
        )
        self.orders.commit()
        logger.info(f"Order {order_id} linked to payment session {session.id}")

        order = self.orders.get_order_with_items(order_id)
        return CheckoutResult(order=order_view(order), session_url=session.url)

    def _mark_failed(self, order_id: str) -> None:
        # compensating write, outside the checkout transaction
        try:
            self.orders.update_order(order_id, {"status": OrderStatus.FAILED.value})
            self.orders.commit()
        except Exception:
            self.orders.rollback()
            logger.critical(
                f"Compensating write failed, order {order_id} left without status",
                exc_info=True,
            )
