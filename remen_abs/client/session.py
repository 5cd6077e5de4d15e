# remen_abs/client/session.py
import logging

from remen_abs.client.identity import CartIdentity
from remen_abs.client.reducer import (
    CartAction,
    CartState,
    cart_reducer,
    transform_cart_data,
)
from remen_abs.client.sync import CartSyncClient, CartSyncError

logger = logging.getLogger(__name__)


class CartSession:
    """
    Local cart state kept in step with the server cart.

    Every operation marks the state as loading, makes the server call and
    then applies the matching reducer action. A failed call records the
    error on the state and keeps the previous items. Loads stop there;
    mutations also re-raise so the caller can react.
    """

    def __init__(self, sync: CartSyncClient, identity: CartIdentity):
        self.sync = sync
        self.identity = identity
        self.state = CartState()

    def dispatch(self, action_type: str, payload=None) -> CartState:
        self.state = cart_reducer(self.state, CartAction(type=action_type, payload=payload))
        return self.state

    def _fail(self, exc: CartSyncError) -> None:
        logger.warning("Cart operation failed: %s", exc.message)
        self.dispatch("SET_ERROR", exc.message)

    # ----- Loading -----

    def load(self) -> CartState:
        self.dispatch("SET_LOADING", True)
        try:
            cart = self.sync.get_cart(self.identity)
        except CartSyncError as exc:
            self._fail(exc)
            return self.state
        return self.dispatch("LOAD_CART", transform_cart_data(cart))

    # ----- Mutations -----

    def add_item(
        self,
        sku: str,
        price: int,
        qty: int = 1,
        name: str | None = None,
        brand: str | None = None,
        model: str | None = None,
        image_url: str | None = None,
        in_stock: bool = True,
    ) -> CartState:
        self.dispatch("SET_LOADING", True)
        try:
            self.sync.add_item(
                self.identity,
                sku=sku,
                qty=qty,
                price_at_add=price,
                name=name,
                brand=brand,
                model=model,
                image_url=image_url,
                in_stock=in_stock,
            )
        except CartSyncError as exc:
            self._fail(exc)
            raise

        line = transform_cart_data(
            {
                "items": [
                    {
                        "sku": sku,
                        "qty": qty,
                        "priceAtAdd": price,
                        "name": name,
                        "brand": brand,
                        "model": model,
                        "imageUrl": image_url,
                        "inStock": in_stock,
                    }
                ]
            }
        )[0]
        return self.dispatch("ADD_ITEM", line)

    def update_quantity(self, sku: str, quantity: int) -> CartState:
        """
        Quantity <= 0 deletes the line on the server, and locally too.
        """
        self.dispatch("SET_LOADING", True)
        try:
            self.sync.update_item(self.identity, sku, qty=quantity)
        except CartSyncError as exc:
            self._fail(exc)
            raise

        if quantity <= 0:
            return self.dispatch("REMOVE_ITEM", sku)
        return self.dispatch("UPDATE_QUANTITY", {"id": sku, "quantity": quantity})

    def set_checked(self, sku: str, checked: bool) -> CartState:
        self.dispatch("SET_LOADING", True)
        try:
            self.sync.update_item(self.identity, sku, checked=checked)
        except CartSyncError as exc:
            self._fail(exc)
            raise
        return self.dispatch("UPDATE_CHECKED", {"id": sku, "checked": checked})

    def remove_item(self, sku: str) -> CartState:
        self.dispatch("SET_LOADING", True)
        try:
            self.sync.remove_item(self.identity, sku)
        except CartSyncError as exc:
            self._fail(exc)
            raise
        return self.dispatch("REMOVE_ITEM", sku)

    def clear(self) -> CartState:
        self.dispatch("SET_LOADING", True)
        try:
            self.sync.clear_cart(self.identity)
        except CartSyncError as exc:
            self._fail(exc)
            raise
        return self.dispatch("CLEAR_CART")

    # ----- Sign-in -----

    def sign_in(self, user_id: str, access_token: str) -> CartState:
        """
        Fold the guest cart into the user's cart, then follow the user cart.
        """
        signed_in = self.identity.signed_in(user_id, access_token)
        self.dispatch("SET_LOADING", True)
        try:
            self.sync.merge_cart_on_sign_in(signed_in, user_id)
        except CartSyncError as exc:
            self._fail(exc)
            raise

        self.identity = signed_in
        return self.load()

    # ----- Lookups -----

    def is_in_cart(self, sku: str) -> bool:
        return any(item.id == sku for item in self.state.items)

    def item_quantity(self, sku: str) -> int:
        for item in self.state.items:
            if item.id == sku:
                return item.quantity
        return 0
