"""
HTTP API Pydantic Models

Request/response schemas shared by the cart and checkout routers.
"""
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


# ==================== CART MODELS ====================

class AddItemRequest(BaseModel):
    name: str
    price: Decimal
    image: str = ""


class LineItemResponse(BaseModel):
    index: int
    name: str
    image: str
    quantity: int
    unit_price: float
    total: float
    total_display: str


class NotificationResponse(BaseModel):
    message: str
    severity: str


class CartResponse(BaseModel):
    is_empty: bool
    item_count: int
    items: list[LineItemResponse]
    subtotal: float
    delivery: float
    total: float
    subtotal_display: str
    delivery_display: str
    total_display: str
    notifications: list[NotificationResponse] = []


# ==================== CHECKOUT MODELS ====================

class CheckoutRequest(BaseModel):
    full_name: Optional[str] = ""
    phone: Optional[str] = ""
    address: Optional[str] = ""
    notes: Optional[str] = ""


class CustomerResponse(BaseModel):
    full_name: str
    phone: str
    address: str
    notes: str


class OrderItemResponse(BaseModel):
    name: str
    price: float
    image: str
    quantity: int


class OrderResponse(BaseModel):
    order_id: str
    items: list[OrderItemResponse]
    customer: CustomerResponse
    subtotal: float
    delivery_fee: float
    total: float
    created_at: int
    notifications: list[NotificationResponse] = []


class ValidationErrorResponse(BaseModel):
    error: str
    field: Optional[str] = None
    message: str
