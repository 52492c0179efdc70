# storefront/domain/errors.py
"""
Domain errors.

They subclass the builtin exceptions the routers already translate
(ValueError -> 400, PermissionError -> 403, LookupError -> 404,
RuntimeError -> 409), so callers that only know the builtins keep working.
"""


class CartEmptyError(ValueError):
    def __init__(self, message: str = "Cart not found or empty"):
        super().__init__(message)


class InvalidQuantityError(ValueError):
    def __init__(self, message: str = "Quantity must be greater than 0"):
        super().__init__(message)


class AuthenticationRequiredError(PermissionError):
    def __init__(self, message: str = "Authentication required. Please sign in to complete your purchase."):
        super().__init__(message)


class NotFoundError(LookupError):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class CartItemNotFoundError(NotFoundError):
    def __init__(self, item_id: str):
        super().__init__(f"Cart item {item_id} not found")


class ProductNotFoundError(NotFoundError):
    def __init__(self, ref: str):
        super().__init__(f"Product {ref} not found")


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: str):
        super().__init__(f"Order {order_id} not found")


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: str):
        super().__init__(f"User {user_id} not found")


class ConcurrencyConflictError(RuntimeError):
    pass


class CheckoutInProgressError(ConcurrencyConflictError):
    def __init__(self, cart_id: str):
        super().__init__(f"Checkout already in progress for cart {cart_id}")


class PaymentSessionError(RuntimeError):
    def __init__(self, message: str = "Failed to create checkout session"):
        super().__init__(message)


class WebhookVerificationError(ValueError):
    pass


class WebhookPayloadError(ValueError):
    pass
