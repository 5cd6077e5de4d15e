# remen_abs/models/product.py
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON
from sqlmodel import SQLModel, Field

from remen_abs.models.cart import utcnow


class Product(SQLModel, table=True):
    """
    Remanufactured / resold ABS module.

    Each listing is a single physical unit: once an order for it is paid
    the product is flagged `sold_out` and drops out of stock. The string
    form of `id` is the `sku` used by carts.
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=200,
        index=True,
        description="Display name of the module",
    )

    brand: str = Field(
        max_length=50,
        index=True,
        description="Vehicle brand (e.g. BMW, Lexus)",
    )

    model: str = Field(
        max_length=100,
        description="Vehicle model",
    )

    year: str | None = Field(default=None, max_length=20)

    price: int = Field(
        gt=0,
        description="Unit price in KRW",
    )

    description: str = Field(default="")

    features: list[str] = Field(default_factory=list, sa_type=JSON)

    image_url: str = Field(
        default="",
        description="Main image URL (Supabase Storage)",
    )

    image_urls: list[str] = Field(
        default_factory=list,
        sa_type=JSON,
        description="Gallery image URLs",
    )

    in_stock: bool = Field(default=True, index=True)
    sold_out: bool = Field(default=False, index=True)

    rating: float = Field(default=0, ge=0, le=5)

    # {brakeTest, absTest, pressureTest, electricalTest}
    inspection_results: dict[str, str] | None = Field(default=None, sa_type=JSON)

    created_at: datetime = Field(
        default_factory=utcnow,
        description="Creation timestamp (UTC)",
    )
