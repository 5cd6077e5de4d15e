# remen_abs/services/cart_service.py
import logging
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from remen_abs.models.cart import CartDocument, utcnow
from remen_abs.repositories.cart_repo import CartRepository, CartScope
from remen_abs.schemas.cart import (
    AddItemRequest,
    CartItemWire,
    CartWire,
    UpdateItemRequest,
)

logger = logging.getLogger(__name__)


def resolve_scope(cart_id: str, user_id: str | None) -> tuple[CartScope, str]:
    """
    A call that names a user targets that user's cart; otherwise the guest
    cart behind the cookie id.
    """
    if user_id:
        return "user", user_id
    return "guest", cart_id


def merge_items(
    user_items: list[dict[str, Any]],
    guest_items: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """
    Fold guest lines into user lines.

    Matching sku -> guest qty is ADDED to the user's qty (the user's price
    and flags win); unknown sku -> guest line appended. User line order is
    kept, new lines follow in guest order.
    """
    merged = [dict(item) for item in user_items]
    index = {item["sku"]: pos for pos, item in enumerate(merged)}

    for guest in guest_items:
        pos = index.get(guest["sku"])
        if pos is None:
            index[guest["sku"]] = len(merged)
            merged.append(dict(guest))
        else:
            merged[pos]["qty"] = merged[pos]["qty"] + guest["qty"]

    return merged


class CartService:
    """
    Business logic behind the cart functions.

    Responsibilities:
      - at most one line per sku in a cart
      - lazy cart creation on first add
      - full item-array replace on every write
      - guest -> user merge at sign-in, in one transaction
    """

    def __init__(self, cart_repo: CartRepository):
        self.cart_repo = cart_repo

    # ---- internal helpers ----

    @staticmethod
    def _to_wire(key: str, cart: CartDocument | None) -> CartWire:
        now = utcnow()
        if cart is None:
            return CartWire(id=key, items=[], created_at=now, updated_at=now)
        return CartWire(
            id=key,
            items=[CartItemWire.model_validate(it) for it in cart.items],
            created_at=cart.created_at,
            updated_at=cart.updated_at,
        )

    def _require_cart(self, session: Session, scope: CartScope, key: str) -> CartDocument:
        cart = self.cart_repo.get(session, scope, key)
        if cart is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Cart not found",
            )
        return cart

    @staticmethod
    def _position(items: list[dict[str, Any]], sku: str) -> int | None:
        for pos, item in enumerate(items):
            if item.get("sku") == sku:
                return pos
        return None

    def _find_line(self, items: list[dict[str, Any]], sku: str) -> int:
        pos = self._position(items, sku)
        if pos is not None:
            return pos
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Item not found in cart",
        )

    def _write(
        self,
        session: Session,
        scope: CartScope,
        key: str,
        items: list[dict[str, Any]],
        action: str,
    ) -> None:
        """
        Replace the items and commit; any database error rolls back.
        """
        try:
            self.cart_repo.save_items(session, scope, key, items)
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Cart %s failed for %s", action, key)
            raise

    # ---- queries ----

    def get_cart(
        self,
        session: Session,
        cart_id: str,
        user_id: str | None = None,
    ) -> CartWire:
        """
        Return the cart; an unknown cart reads as an empty one.
        """
        scope, key = resolve_scope(cart_id, user_id)
        return self._to_wire(key, self.cart_repo.get(session, scope, key))

    # ---- mutations ----

    def add_item(self, session: Session, payload: AddItemRequest) -> str:
        """
        Add a line or bump an existing line's quantity.

        Existing lines keep their priceAtAdd and display metadata.
        """
        scope, key = resolve_scope(payload.cart_id, payload.user_id)
        cart = self.cart_repo.get(session, scope, key)
        items = [dict(it) for it in cart.items] if cart else []

        pos = self._position(items, payload.sku)
        if pos is None:
            items.append(payload.to_item().model_dump(by_alias=True))
        else:
            items[pos]["qty"] = items[pos]["qty"] + payload.qty

        self._write(session, scope, key, items, "addItem")
        return "Item added to cart"

    def update_item(self, session: Session, payload: UpdateItemRequest) -> str:
        """
        Change quantity and/or checked flag of one line.

        qty <= 0 deletes the line. Unknown cart or sku -> 404.
        """
        if payload.qty is None and payload.checked is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="qty or checked is required",
            )

        scope, key = resolve_scope(payload.cart_id, payload.user_id)
        cart = self._require_cart(session, scope, key)
        items = [dict(it) for it in cart.items]
        pos = self._find_line(items, payload.sku)

        if payload.qty is not None and payload.qty <= 0:
            del items[pos]
            message = "Item removed from cart"
        else:
            if payload.qty is not None:
                items[pos]["qty"] = payload.qty
            if payload.checked is not None:
                items[pos]["checked"] = payload.checked
            message = "Cart item updated"

        self._write(session, scope, key, items, "updateItem")
        return message

    def remove_item(
        self,
        session: Session,
        cart_id: str,
        sku: str,
        user_id: str | None = None,
    ) -> str:
        scope, key = resolve_scope(cart_id, user_id)
        cart = self._require_cart(session, scope, key)
        items = [dict(it) for it in cart.items]
        del items[self._find_line(items, sku)]

        self._write(session, scope, key, items, "removeItem")
        return "Item removed from cart"

    def clear_cart(
        self,
        session: Session,
        cart_id: str,
        user_id: str | None = None,
    ) -> str:
        """
        Empty the cart but keep the document. Unknown cart is a no-op.
        """
        scope, key = resolve_scope(cart_id, user_id)
        if self.cart_repo.get(session, scope, key) is None:
            return "Cart already empty"

        self._write(session, scope, key, [], "clearCart")
        return "Cart cleared"

    def merge_on_sign_in(self, session: Session, cart_id: str, user_id: str) -> str:
        """
        Fold the guest cart into the user's cart and delete the guest cart.

        Steps:
          1. Guest cart absent or empty -> nothing to do (an empty guest
             document is still removed).
          2. No user cart -> guest items become the user cart verbatim.
          3. Otherwise quantities of matching skus are added, new skus appended.
          4. User-cart write and guest-cart delete commit together, so a
             retry after a failure never counts guest items twice.
        """
        guest = self.cart_repo.get(session, "guest", cart_id)
        if guest is None:
            return "No guest cart to merge"

        guest_items = [dict(it) for it in guest.items]
        try:
            if guest_items:
                user_cart = self.cart_repo.get(session, "user", user_id)
                if user_cart is None:
                    merged = guest_items
                else:
                    merged = merge_items(user_cart.items, guest_items)
                self.cart_repo.save_items(session, "user", user_id, merged)
            self.cart_repo.delete(session, "guest", cart_id)
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Cart merge failed: guest=%s user=%s", cart_id, user_id)
            raise

        if not guest_items:
            return "No guest cart to merge"

        logger.info(
            "Merged %d guest line(s) from %s into user cart %s",
            len(guest_items),
            cart_id,
            user_id,
        )
        return "Cart merged"

    # ---- checkout support ----

    def checked_items(self, session: Session, user_id: str) -> list[CartItemWire]:
        cart = self.cart_repo.get(session, "user", user_id)
        if cart is None:
            return []
        lines = [CartItemWire.model_validate(it) for it in cart.items]
        return [line for line in lines if line.checked]
