# remen_abs/client/reducer.py
"""
Client-side cart state machine.

`cart_reducer(state, action)` is pure: it never performs I/O and always
returns a new `CartState`. Totals are recomputed from the full item list
on every action that changes quantities.
"""
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

ActionType = Literal[
    "SET_LOADING",
    "SET_ERROR",
    "LOAD_CART",
    "ADD_ITEM",
    "REMOVE_ITEM",
    "UPDATE_QUANTITY",
    "UPDATE_CHECKED",
    "CLEAR_CART",
]


class CartLineItem(BaseModel):
    """
    One cart line in display shape. `id` is the product sku.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    sku: str
    name: str = "Unknown Product"
    brand: str = "Unknown Brand"
    model: str = "Unknown Model"
    price: int = 0
    image_url: str = ""
    quantity: int = 1
    in_stock: bool = True
    checked: bool = True


class CartState(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: tuple[CartLineItem, ...] = ()
    total_items: int = 0
    total_price: int = 0
    loading: bool = False
    error: str | None = None


class CartAction(BaseModel):
    """
    Payload by type:
      SET_LOADING      bool
      SET_ERROR        str | None
      LOAD_CART        list[CartLineItem]
      ADD_ITEM         CartLineItem
      REMOVE_ITEM      sku
      UPDATE_QUANTITY  {"id": sku, "quantity": int}
      UPDATE_CHECKED   {"id": sku, "checked": bool}
      CLEAR_CART       None
    """

    model_config = ConfigDict(frozen=True)

    type: ActionType
    payload: Any = None


def _with_totals(state: CartState, items: list[CartLineItem] | tuple[CartLineItem, ...]) -> CartState:
    items = tuple(items)
    return state.model_copy(
        update={
            "items": items,
            "total_items": sum(i.quantity for i in items),
            "total_price": sum(i.price * i.quantity for i in items),
            "loading": False,
            "error": None,
        }
    )


def cart_reducer(state: CartState, action: CartAction) -> CartState:
    kind = action.type
    payload = action.payload

    if kind == "SET_LOADING":
        return state.model_copy(update={"loading": bool(payload)})

    if kind == "SET_ERROR":
        # prior items stay as they were
        return state.model_copy(update={"error": payload, "loading": False})

    if kind == "LOAD_CART":
        return _with_totals(state, payload or ())

    if kind == "ADD_ITEM":
        added: CartLineItem = payload
        if any(i.id == added.id for i in state.items):
            items = [
                i.model_copy(update={"quantity": i.quantity + added.quantity})
                if i.id == added.id
                else i
                for i in state.items
            ]
        else:
            items = [*state.items, added]
        return _with_totals(state, items)

    if kind == "REMOVE_ITEM":
        return _with_totals(state, [i for i in state.items if i.id != payload])

    if kind == "UPDATE_QUANTITY":
        quantity = max(1, int(payload["quantity"]))
        items = [
            i.model_copy(update={"quantity": quantity}) if i.id == payload["id"] else i
            for i in state.items
        ]
        return _with_totals(state, items)

    if kind == "UPDATE_CHECKED":
        items = tuple(
            i.model_copy(update={"checked": bool(payload["checked"])}) if i.id == payload["id"] else i
            for i in state.items
        )
        return state.model_copy(update={"items": items, "loading": False})

    if kind == "CLEAR_CART":
        return _with_totals(state, ())

    return state


def transform_cart_data(cart: dict[str, Any] | None) -> list[CartLineItem]:
    """
    Wire cart (`{"items": [{sku, qty, priceAtAdd, ...}]}`) to display lines.
    """
    if not cart or not cart.get("items"):
        return []

    return [
        CartLineItem(
            id=item["sku"],
            sku=item["sku"],
            name=item.get("name") or "Unknown Product",
            brand=item.get("brand") or "Unknown Brand",
            model=item.get("model") or "Unknown Model",
            price=item.get("priceAtAdd") or 0,
            image_url=item.get("imageUrl") or "",
            quantity=item.get("qty") or 1,
            in_stock=item.get("inStock") is not False,
            checked=item.get("checked") is not False,
        )
        for item in cart["items"]
    ]
