# remen_abs/models/order.py
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON
from sqlmodel import SQLModel, Field

from remen_abs.models.cart import utcnow


class Order(SQLModel, table=True):
    """
    Customer order.

    Created once at checkout from the checked cart lines. `items` is a deep
    copy of those lines with `orderPrice` frozen at submission time; the
    order never points back at the cart. Only `status`, `payment`,
    `tracking_number` and `updated_at` change afterwards.
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_number: str = Field(
        index=True,
        max_length=32,
        description="YYYYMMDD-NNN",
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    # pending | payment_pending | payment_completed | processing
    # | shipped | delivered | cancelled | refunded
    status: str = Field(
        default="pending",
        index=True,
        description="Order status lifecycle",
    )

    # {name, email, phone}
    customer: dict[str, Any] = Field(default_factory=dict, sa_type=JSON)

    # {method, recipient: {name, phone, address: {...}}, memo}
    shipping: dict[str, Any] = Field(default_factory=dict, sa_type=JSON)

    # {method, amount, status, transactionId, pgProvider, paidAt}
    payment: dict[str, Any] = Field(default_factory=dict, sa_type=JSON)

    items: list[dict[str, Any]] = Field(default_factory=list, sa_type=JSON)

    total_amount: int = Field(description="Sum of order_price * quantity")
    shipping_fee: int = Field(default=0)
    discount_amount: int = Field(default=0)
    final_amount: int = Field(description="total + shipping - discount")

    tracking_number: str | None = Field(default=None, max_length=64)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
