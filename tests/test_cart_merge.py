# tests/test_cart_merge.py
import logging

import pytest
from sqlalchemy.exc import IntegrityError

from remen_abs.models.cart import GuestCart, UserCart
from remen_abs.repositories.cart_repo import CartRepository
from remen_abs.schemas.cart import AddItemRequest
from remen_abs.services.cart_service import CartService, merge_items


def line(sku: str, qty: int, price: int = 1000) -> dict:
    return {"sku": sku, "qty": qty, "priceAtAdd": price, "checked": True}


def seed(session, scope, key, items):
    CartRepository().save_items(session, scope, key, items)
    session.commit()


def quantities(cart) -> list[tuple[str, int]]:
    return [(it["sku"], it["qty"]) for it in cart.items]


def test_merge_items_adds_quantities_and_appends():
    merged = merge_items([line("A", 1), line("B", 1)], [line("A", 2), line("C", 4)])

    assert [(it["sku"], it["qty"]) for it in merged] == [("A", 3), ("B", 1), ("C", 4)]


def test_merge_keeps_user_price_for_matching_sku():
    merged = merge_items([line("A", 1, price=500)], [line("A", 1, price=900)])

    assert merged[0]["priceAtAdd"] == 500


def test_merge_into_existing_user_cart(session):
    seed(session, "guest", "guest-1", [line("A", 2)])
    seed(session, "user", "user-1", [line("A", 1), line("B", 1)])

    message = CartService(CartRepository()).merge_on_sign_in(session, "guest-1", "user-1")

    assert message == "Cart merged"
    session.expire_all()
    assert quantities(session.get(UserCart, "user-1")) == [("A", 3), ("B", 1)]
    assert session.get(GuestCart, "guest-1") is None


def test_merge_without_user_cart_copies_guest_items(session):
    seed(session, "guest", "guest-1", [line("A", 2), line("B", 1)])

    CartService(CartRepository()).merge_on_sign_in(session, "guest-1", "user-1")

    session.expire_all()
    assert quantities(session.get(UserCart, "user-1")) == [("A", 2), ("B", 1)]
    assert session.get(GuestCart, "guest-1") is None


def test_merge_absent_guest_cart_is_noop(session):
    seed(session, "user", "user-1", [line("A", 1)])

    message = CartService(CartRepository()).merge_on_sign_in(session, "missing", "user-1")

    assert message == "No guest cart to merge"
    session.expire_all()
    assert quantities(session.get(UserCart, "user-1")) == [("A", 1)]


def test_merge_empty_guest_cart_leaves_user_cart(session):
    seed(session, "guest", "guest-1", [])
    seed(session, "user", "user-1", [line("A", 1)])

    message = CartService(CartRepository()).merge_on_sign_in(session, "guest-1", "user-1")

    assert message == "No guest cart to merge"
    session.expire_all()
    assert quantities(session.get(UserCart, "user-1")) == [("A", 1)]
    assert session.get(GuestCart, "guest-1") is None


def test_second_merge_does_not_double_count(session):
    seed(session, "guest", "guest-1", [line("A", 2)])
    seed(session, "user", "user-1", [line("A", 1)])
    service = CartService(CartRepository())

    service.merge_on_sign_in(session, "guest-1", "user-1")
    service.merge_on_sign_in(session, "guest-1", "user-1")

    session.expire_all()
    assert quantities(session.get(UserCart, "user-1")) == [("A", 3)]


def test_merge_endpoint(client, customer, customer_headers):
    user_id = str(customer.id)
    client.post("/api/addItem", json={"cartId": "guest-1", "sku": "A", "qty": 2})

    res = client.post(
        "/api/mergeCartOnSignIn",
        json={"cartId": "guest-1", "userId": user_id},
        headers=customer_headers,
    )

    assert res.status_code == 200
    assert res.json() == {"ok": True, "message": "Cart merged"}
    guest = client.post("/api/getCart", json={"cartId": "guest-1"}).json()["cart"]
    assert guest["items"] == []


def test_failed_write_rolls_back_and_is_logged(session, monkeypatch, caplog):
    rollbacks = []
    real_rollback = session.rollback

    def duplicate_key():
        raise IntegrityError("INSERT INTO carts", {}, Exception("UNIQUE constraint failed"))

    def tracking_rollback():
        rollbacks.append(True)
        real_rollback()

    monkeypatch.setattr(session, "flush", duplicate_key)
    monkeypatch.setattr(session, "rollback", tracking_rollback)
    payload = AddItemRequest(cartId="c1", sku="A", qty=1, priceAtAdd=1000)

    with caplog.at_level(logging.ERROR), pytest.raises(IntegrityError):
        CartService(CartRepository()).add_item(session, payload)

    assert rollbacks == [True]
    assert "Cart addItem failed for c1" in caplog.text
