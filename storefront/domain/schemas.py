# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Any, Dict, List, Optional
from decimal import Decimal
from datetime import datetime

from storefront.domain.order_status import AdminOrderStatus


class ProductOut(BaseModel):
    """Product as shown in the catalog and inside cart/order lines."""

    id: str
    name: str
    slug: str
    description: Optional[str] = None
    image: Optional[str] = None
    price: Decimal
    inventory: int

    model_config = ConfigDict(from_attributes=True)


class ItemIn(BaseModel):
    """Schema for adding a product to the cart."""

    product_id: str = Field(..., min_length=1, description="Product id")
    quantity: int = Field(1, gt=0, description="Quantity (must be > 0)")


class QuantityIn(BaseModel):
    """Schema for setting a cart line quantity; <= 0 removes the line."""

    quantity: int


class CartItemOut(BaseModel):
    id: str
    product_id: str
    quantity: int
    product: ProductOut

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    """Cart with totals computed from current product prices."""

    id: str
    user_id: Optional[str] = None
    items: List[CartItemOut]
    size: int
    subtotal: Decimal


class CartSizeOut(BaseModel):
    size: int


class UserCreate(BaseModel):
    """Schema for creating a user."""

    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    role: str = Field("user", pattern="^(user|admin)$")


class UserRead(BaseModel):
    id: str
    name: str
    email: str
    role: str

    model_config = ConfigDict(from_attributes=True)


class OrderItemOut(BaseModel):
    id: str
    product_id: str
    quantity: int
    price: Decimal
    product_name: Optional[str] = None


class OrderOut(BaseModel):
    """Order with its frozen line items."""

    id: str
    user_id: Optional[str] = None
    status: Optional[str] = None
    total: Decimal
    stripe_session_id: Optional[str] = None
    stripe_payment_intent_id: Optional[str] = None
    version: int
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemOut]


class CheckoutOut(BaseModel):
    order: OrderOut
    session_url: str


class OrderSummaryOut(BaseModel):
    id: str
    status: Optional[str] = None
    total: Decimal
    created_at: datetime
    updated_at: datetime
    items_count: int


class OrderPageOut(BaseModel):
    orders: List[OrderSummaryOut]
    total_count: int
    total_pages: int
    current_page: int


class OrderStatusUpdate(BaseModel):
    """Admin status change; expected_version enables optimistic locking."""

    status: AdminOrderStatus
    expected_version: Optional[int] = Field(None, gt=0)


class WebhookAck(BaseModel):
    received: bool = True


class ActivityLogOut(BaseModel):
    id: str
    user_id: str
    action: str
    entity_type: str
    entity_id: str
    details: Optional[Dict[str, Any]] = None
    created_at: datetime


class ActivityPageOut(BaseModel):
    entries: List[ActivityLogOut]
    total_count: int
    total_pages: int
    current_page: int
