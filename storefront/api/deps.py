# storefront/api/deps.py
from typing import Optional

from fastapi import Cookie, Header

from storefront.domain.identity import CartIdentity
from storefront.services.lock_service import LockService
from storefront.services.payment_gateway import PaymentGateway, StripeGateway
from storefront.utils.settings import CART_COOKIE_NAME

_lock_service: LockService | None = None


def get_user_id(x_user_id: Optional[str] = Header(None, alias="X-User-Id")) -> Optional[str]:
    # authentication happens upstream, we only receive the resolved user id
    return x_user_id or None


def get_identity(
    cart_id: Optional[str] = Cookie(None, alias=CART_COOKIE_NAME),
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
) -> CartIdentity:
    return CartIdentity(cart_id=cart_id or None, user_id=x_user_id or None)


def get_payment_gateway() -> PaymentGateway:
    return StripeGateway()


def get_lock_service() -> LockService:
    global _lock_service
    if _lock_service is None:
        _lock_service = LockService()
    return _lock_service
