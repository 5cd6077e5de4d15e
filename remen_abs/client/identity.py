# remen_abs/client/identity.py
"""
Guest cart identity.

A browser session is identified by the `cartId` cookie until the visitor
signs in. The identity is resolved once per session and handed to every
cart call explicitly.
"""
import uuid
from dataclasses import dataclass, replace
from typing import Mapping

CART_COOKIE = "cartId"
CART_COOKIE_MAX_AGE = 60 * 60 * 24 * 30  # 30 days


def ensure_cart_id(cookies: Mapping[str, str] | None = None) -> str:
    """
    Return the `cartId` cookie value, or a fresh UUID4 when there is none.
    """
    if cookies:
        existing = (cookies.get(CART_COOKIE) or "").strip()
        if existing:
            return existing
    return str(uuid.uuid4())


def cart_cookie_header(cart_id: str) -> str:
    """
    `Set-Cookie` value that persists the guest cart id.
    """
    return (
        f"{CART_COOKIE}={cart_id}; Max-Age={CART_COOKIE_MAX_AGE}; "
        "Path=/; SameSite=Lax; Secure"
    )


@dataclass(frozen=True)
class CartIdentity:
    """
    Who a cart call acts for.

    Guests only have `cart_id`; signed-in users also carry their id and
    the bearer token the server checks it against.
    """

    cart_id: str
    user_id: str | None = None
    access_token: str | None = None

    @classmethod
    def from_cookies(cls, cookies: Mapping[str, str] | None = None) -> "CartIdentity":
        return cls(cart_id=ensure_cart_id(cookies))

    @property
    def is_guest(self) -> bool:
        return self.user_id is None

    def signed_in(self, user_id: str, access_token: str) -> "CartIdentity":
        return replace(self, user_id=user_id, access_token=access_token)

    def body(self, **fields) -> dict:
        """
        Request body for a cart function: identity fields plus `fields`.
        Fields set to None are left out.
        """
        payload = {"cartId": self.cart_id}
        if self.user_id is not None:
            payload["userId"] = self.user_id
        payload.update({k: v for k, v in fields.items() if v is not None})
        return payload

    def headers(self) -> dict[str, str]:
        if self.access_token:
            return {"Authorization": f"Bearer {self.access_token}"}
        return {}
