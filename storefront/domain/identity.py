# storefront/domain/identity.py
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CartIdentity:
    """
    Who is shopping: the cart id from the cart cookie and the signed-in user
    id, either of which may be missing. Passed explicitly into every cart and
    checkout call.
    """

    cart_id: Optional[str] = None
    user_id: Optional[str] = None
