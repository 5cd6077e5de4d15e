# remen_abs/repositories/cart_repo.py
from typing import Any, Literal

from sqlmodel import Session

from remen_abs.models.cart import CartDocument, GuestCart, UserCart, utcnow

CartScope = Literal["guest", "user"]

_TABLES: dict[str, type[CartDocument]] = {
    "guest": GuestCart,
    "user": UserCart,
}


class CartRepository:
    """
    Data access layer for cart documents.

    NOTE:
      - No commits here; the merge touches two documents and must commit
        once. The service is responsible for session.commit().
      - `save_items` always replaces the full item array.
    """

    def get(self, session: Session, scope: CartScope, key: str) -> CartDocument | None:
        return session.get(_TABLES[scope], key)

    def save_items(
        self,
        session: Session,
        scope: CartScope,
        key: str,
        items: list[dict[str, Any]],
    ) -> CartDocument:
        """
        Create the document if missing, then replace its items.
        """
        cart = self.get(session, scope, key)
        if cart is None:
            cart = _TABLES[scope](id=key)
        cart.items = list(items)
        cart.updated_at = utcnow()
        session.add(cart)
        session.flush()
        return cart

    def delete(self, session: Session, scope: CartScope, key: str) -> bool:
        cart = self.get(session, scope, key)
        if cart is None:
            return False
        session.delete(cart)
        session.flush()
        return True
