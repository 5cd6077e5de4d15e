# remen_abs/models/cart.py
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CartDocument(SQLModel):
    """
    Shared shape of a cart document.

    `items` holds the wire-format line items (sku, qty, priceAtAdd, ...)
    in insertion order. Every mutating write replaces the whole list;
    there is at most one line per sku.
    """

    id: str = Field(
        primary_key=True,
        index=True,
        max_length=128,
    )

    items: list[dict[str, Any]] = Field(
        default_factory=list,
        sa_type=JSON,
    )

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class GuestCart(CartDocument, table=True):
    """
    Cart of an anonymous visitor, keyed by the client-generated `cartId`
    cookie value.
    """

    __tablename__ = "carts"


class UserCart(CartDocument, table=True):
    """
    Cart of a signed-in customer, keyed by the user id (string form).
    """

    __tablename__ = "user_carts"
