# remen_abs/schemas/cart.py
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class WireModel(SQLModel):
    """
    Base for cart function payloads.

    The storefront speaks camelCase (`cartId`, `priceAtAdd`, ...); Python
    code uses snake_case. Both spellings are accepted on input.
    """

    model_config = ConfigDict(populate_by_name=True)


class CartItemWire(WireModel):
    """
    One cart line as stored in the cart document and sent to clients.
    """

    sku: str
    qty: int = Field(ge=1)
    price_at_add: int = Field(default=0, ge=0, alias="priceAtAdd")
    name: str | None = None
    brand: str | None = None
    model: str | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")
    in_stock: bool = Field(default=True, alias="inStock")
    checked: bool = True


class CartWire(WireModel):
    id: str
    items: list[CartItemWire]
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")


# ---- Requests ----


class CartRequest(WireModel):
    """
    Every cart call carries the guest cart id; user-scoped calls also
    carry the signed-in user's id.
    """

    cart_id: str = Field(alias="cartId", min_length=1, max_length=128)
    user_id: str | None = Field(default=None, alias="userId")

    @field_validator("cart_id")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("cartId cannot be empty")
        return v


class UserCartRequest(CartRequest):
    user_id: str = Field(alias="userId", min_length=1)


class AddItemRequest(CartRequest):
    sku: str = Field(min_length=1)
    qty: int = Field(default=1, ge=1)
    price_at_add: int = Field(default=0, ge=0, alias="priceAtAdd")
    name: str | None = None
    brand: str | None = None
    model: str | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")
    in_stock: bool = Field(default=True, alias="inStock")

    def to_item(self) -> CartItemWire:
        return CartItemWire(
            sku=self.sku,
            qty=self.qty,
            price_at_add=self.price_at_add,
            name=self.name,
            brand=self.brand,
            model=self.model,
            image_url=self.image_url,
            in_stock=self.in_stock,
            checked=True,
        )


class UpdateItemRequest(CartRequest):
    """
    qty <= 0 removes the line; `checked` flips the checkout selection.
    """

    sku: str = Field(min_length=1)
    qty: int | None = None
    checked: bool | None = None


class RemoveItemRequest(CartRequest):
    sku: str = Field(min_length=1)


class MergeCartRequest(UserCartRequest):
    pass


# ---- Responses ----


class CartResponse(WireModel):
    ok: bool = True
    cart: CartWire


class MessageResponse(WireModel):
    ok: bool = True
    message: str
