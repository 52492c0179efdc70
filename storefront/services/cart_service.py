from decimal import Decimal
from typing import Any, Dict, Tuple

from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import (
    CartItemNotFoundError,
    InvalidQuantityError,
    ProductNotFoundError,
)
from storefront.domain.identity import CartIdentity
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def product_view(product) -> Dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "slug": product.slug,
        "description": product.description,
        "image": product.image,
        "price": product.price,
        "inventory": product.inventory,
    }


def cart_totals(cart: CartModel) -> Tuple[int, Decimal]:
    """(size, subtotal) priced from the products' current prices."""
    size = sum(i.quantity for i in cart.items)
    subtotal = sum((i.product.price * i.quantity for i in cart.items), Decimal("0.00"))
    return size, subtotal


class CartService:
    """
    Use cases for the cart domain.
    commands (add, increment, decrement, set_quantity, remove) change state,
    queries (get_cart, get_cart_size) only read.
    A missing cart is a normal state, not an error.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    #query
    def get_cart(self, identity: CartIdentity) -> Dict[str, Any] | None:
        cart = self._find_cart(identity)
        if not cart:
            return None
        return self._to_view(cart)

    def get_cart_size(self, identity: CartIdentity) -> int:
        cart = self._find_cart(identity)
        if not cart:
            return 0
        return sum(i.quantity for i in cart.items)

    #commands
    def add(self, identity: CartIdentity, product_id: str, quantity: int) -> Tuple[Dict[str, Any], bool]:
        """Adds a product; returns (cart view, whether a new cart was created)."""
        if quantity <= 0:
            raise InvalidQuantityError()

        if not self.products.get_product(product_id):
            raise ProductNotFoundError(product_id)

        cart, created = self._get_or_create_cart(identity)

        existing_item = self.repo.get_cart_item_by_product(cart.id, product_id)
        if existing_item:
            logger.info(
                f"Product {product_id} already in cart {cart.id}, quantity "
                f"{existing_item.quantity} -> {existing_item.quantity + quantity}"
            )
            self.repo.update_quantity(existing_item, existing_item.quantity + quantity)
        else:
            logger.info(f"Adding product {product_id} to cart {cart.id}")
            self.repo.add_cart_item(
                CartItemModel(cart_id=cart.id, product_id=product_id, quantity=quantity)
            )

        return self._view_by_id(cart.id), created

    def increment(self, identity: CartIdentity, item_id: str) -> Dict[str, Any]:
        item = self._get_item(identity, item_id)
        self.repo.update_quantity(item, item.quantity + 1)
        return self._view_by_id(item.cart_id)

    def decrement(self, identity: CartIdentity, item_id: str) -> Dict[str, Any]:
        item = self._get_item(identity, item_id)
        cart_id = item.cart_id
        if item.quantity <= 1:
            self.repo.delete_cart_item(item)
        else:
            self.repo.update_quantity(item, item.quantity - 1)
        return self._view_by_id(cart_id)

    def set_quantity(self, identity: CartIdentity, item_id: str, quantity: int) -> Dict[str, Any]:
        item = self._get_item(identity, item_id)
        cart_id = item.cart_id
        if quantity <= 0:
            self.repo.delete_cart_item(item)
        else:
            self.repo.update_quantity(item, quantity)
        return self._view_by_id(cart_id)

    def remove(self, identity: CartIdentity, item_id: str) -> Dict[str, Any]:
        item = self._get_item(identity, item_id)
        cart_id = item.cart_id
        logger.info(f"Removing item {item_id} from cart {cart_id}")
        self.repo.delete_cart_item(item)
        return self._view_by_id(cart_id)

    #helpers
    def _find_cart(self, identity: CartIdentity) -> CartModel | None:
        if not identity.cart_id:
            return None
        return self.repo.get_cart(identity.cart_id)

    def _get_or_create_cart(self, identity: CartIdentity) -> Tuple[CartModel, bool]:
        cart = self._find_cart(identity)
        if cart:
            return cart, False

        created = self.repo.create_cart(CartModel(user_id=identity.user_id))
        logger.info(f"Created cart {created.id} for user {identity.user_id}")
        return created, True

    def _get_item(self, identity: CartIdentity, item_id: str) -> CartItemModel:
        # item ids are only resolved inside the caller's own cart
        item = self.repo.get_cart_item(identity.cart_id, item_id) if identity.cart_id else None
        if not item:
            raise CartItemNotFoundError(item_id)
        return item

    def _view_by_id(self, cart_id: str) -> Dict[str, Any]:
        return self._to_view(self.repo.get_cart(cart_id))

    @staticmethod
    def _to_view(cart: CartModel) -> Dict[str, Any]:
        size, subtotal = cart_totals(cart)
        return {
            "id": cart.id,
            "user_id": cart.user_id,
            "items": [
                {
                    "id": i.id,
                    "product_id": i.product_id,
                    "quantity": i.quantity,
                    "product": product_view(i.product),
                }
                for i in cart.items
            ],
            "size": size,
            "subtotal": subtotal,
        }
