# remen_abs/schemas/order.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, EmailStr, field_validator
from sqlmodel import SQLModel, Field

ShippingMethod = Literal["standard", "express", "pickup"]
PaymentMethod = Literal["card", "bank_transfer", "kakao_pay", "naver_pay", "toss_pay"]
PaymentStatus = Literal["pending", "completed", "failed", "cancelled", "refunded"]
OrderStatus = Literal[
    "pending",
    "payment_pending",
    "payment_completed",
    "processing",
    "shipped",
    "delivered",
    "cancelled",
    "refunded",
]


class Address(SQLModel):
    model_config = ConfigDict(extra="forbid")

    postal_code: str
    address1: str
    address2: str = ""


class Recipient(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    phone: str
    address: Address

    @field_validator("name", "phone")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class ShippingInfo(SQLModel):
    model_config = ConfigDict(extra="forbid")

    method: ShippingMethod = "standard"
    recipient: Recipient
    memo: str | None = None


class CustomerInfo(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    email: EmailStr
    phone: str

    @field_validator("name", "phone")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class PaymentInfo(SQLModel):
    method: PaymentMethod
    amount: int
    status: PaymentStatus = "pending"
    transaction_id: str | None = None
    pg_provider: str | None = None
    paid_at: datetime | None = None


class OrderLine(SQLModel):
    """
    Frozen copy of a cart line. `order_price` is the unit price at the
    moment the order was submitted.
    """

    sku: str
    name: str
    brand: str
    model: str
    image_url: str = ""
    quantity: int
    order_price: int


class OrderCreate(SQLModel):
    """
    Checkout payload.

    User provides:
      - customer contact
      - shipping method + recipient
      - payment method
      - optional coupon code

    Backend derives:
      - items from the checked lines of the user's cart
      - shipping fee, discount, final amount
      - order number and status
    """

    model_config = ConfigDict(extra="forbid")

    customer: CustomerInfo
    shipping: ShippingInfo
    payment_method: PaymentMethod = "card"
    coupon_code: str | None = None

    @field_validator("coupon_code")
    @classmethod
    def normalize_coupon(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class OrderRead(SQLModel):
    id: uuid.UUID
    order_number: str
    user_id: uuid.UUID
    status: OrderStatus
    customer: CustomerInfo
    shipping: ShippingInfo
    payment: PaymentInfo
    items: list[OrderLine]
    total_amount: int
    shipping_fee: int
    discount_amount: int
    final_amount: int
    tracking_number: str | None = None
    created_at: datetime
    updated_at: datetime


class OrderSummary(SQLModel):
    """
    Lightweight row for order lists.
    """

    id: uuid.UUID
    order_number: str
    status: OrderStatus
    final_amount: int
    item_count: int
    created_at: datetime


class OrderStatusUpdate(SQLModel):
    """
    Admin payload to move an order along its lifecycle.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus
    tracking_number: str | None = None
