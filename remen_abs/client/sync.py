# remen_abs/client/sync.py
import logging
from typing import Any

import httpx

from remen_abs.client.identity import CartIdentity

logger = logging.getLogger(__name__)


class CartSyncError(Exception):
    """
    A cart call failed. `status_code` is None for transport failures.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CartSyncClient:
    """
    Request/response wrapper around the cart functions.

    Each method is one POST round trip. The identity is passed in on every
    call; nothing about the caller is remembered between calls. There are
    no retries: a failure raises CartSyncError with the server's `error`
    string, or a generic message when the server gave none.
    """

    def __init__(self, http: httpx.Client, base_path: str = "/api"):
        self.http = http
        self.base_path = base_path.rstrip("/")

    def _call(self, function: str, identity: CartIdentity, **fields) -> dict[str, Any]:
        url = f"{self.base_path}/{function}"
        try:
            res = self.http.post(url, json=identity.body(**fields), headers=identity.headers())
        except httpx.HTTPError as exc:
            logger.warning("Cart call %s failed: %s", function, exc)
            raise CartSyncError("Network error occurred") from exc

        content_type = res.headers.get("content-type", "")
        if "application/json" not in content_type:
            if res.status_code == 404:
                raise CartSyncError("API endpoint not found", res.status_code)
            raise CartSyncError(
                f"Server returned {res.status_code}: {res.reason_phrase}. Expected JSON response.",
                res.status_code,
            )

        try:
            data = res.json()
        except ValueError as exc:
            raise CartSyncError("Invalid JSON response", res.status_code) from exc

        if res.is_error or not data.get("ok"):
            message = data.get("error") or f"HTTP error! status: {res.status_code}"
            raise CartSyncError(message, res.status_code)

        return data

    # ----- Queries -----

    def get_cart(self, identity: CartIdentity) -> dict[str, Any]:
        """
        The identity's cart in wire shape; the user cart once signed in.
        """
        function = "getCart" if identity.is_guest else "getUserCart"
        return self._call(function, identity)["cart"]

    # ----- Mutations -----

    def add_item(
        self,
        identity: CartIdentity,
        sku: str,
        qty: int = 1,
        price_at_add: int | None = None,
        name: str | None = None,
        brand: str | None = None,
        model: str | None = None,
        image_url: str | None = None,
        in_stock: bool | None = None,
    ) -> str:
        data = self._call(
            "addItem",
            identity,
            sku=sku,
            qty=qty,
            priceAtAdd=price_at_add,
            name=name,
            brand=brand,
            model=model,
            imageUrl=image_url,
            inStock=in_stock,
        )
        return data["message"]

    def update_item(
        self,
        identity: CartIdentity,
        sku: str,
        qty: int | None = None,
        checked: bool | None = None,
    ) -> str:
        return self._call("updateItem", identity, sku=sku, qty=qty, checked=checked)["message"]

    def remove_item(self, identity: CartIdentity, sku: str) -> str:
        return self._call("removeItem", identity, sku=sku)["message"]

    def clear_cart(self, identity: CartIdentity) -> str:
        return self._call("clearCart", identity)["message"]

    def merge_cart_on_sign_in(self, identity: CartIdentity, user_id: str) -> str:
        """
        `identity` still names the guest cart; `user_id` is the new owner.
        """
        return self._call("mergeCartOnSignIn", identity, userId=user_id)["message"]
