# tests/test_cart_client.py
import httpx
import pytest

from remen_abs.client.identity import (
    CART_COOKIE,
    CartIdentity,
    cart_cookie_header,
    ensure_cart_id,
)
from remen_abs.client.session import CartSession
from remen_abs.client.sync import CartSyncClient, CartSyncError


@pytest.fixture
def cart_session(client):
    identity = CartIdentity.from_cookies({CART_COOKIE: "guest-1"})
    return CartSession(CartSyncClient(client), identity)


def test_ensure_cart_id_reuses_cookie():
    assert ensure_cart_id({"cartId": "abc"}) == "abc"


def test_ensure_cart_id_generates_new_id():
    first = ensure_cart_id({})
    second = ensure_cart_id(None)

    assert first != second
    assert len(first) == 36


def test_cart_cookie_header():
    header = cart_cookie_header("abc")

    assert header.startswith("cartId=abc;")
    assert "Max-Age=2592000" in header
    assert "SameSite=Lax" in header
    assert "Secure" in header


def test_identity_body_skips_unset_fields():
    identity = CartIdentity(cart_id="c1")

    assert identity.body(sku="A", qty=None) == {"cartId": "c1", "sku": "A"}
    assert identity.headers() == {}

    signed = identity.signed_in("u1", "tok")
    assert signed.body() == {"cartId": "c1", "userId": "u1"}
    assert signed.headers() == {"Authorization": "Bearer tok"}


def test_session_round_trip(cart_session):
    cart_session.add_item("A", price=30000, qty=2, name="ABS Module")
    cart_session.add_item("B", price=10000)
    cart_session.add_item("A", price=30000)
    cart_session.update_quantity("B", 4)

    local = [(i.id, i.quantity) for i in cart_session.state.items]
    state = cart_session.load()

    assert [(i.id, i.quantity) for i in state.items] == local == [("A", 3), ("B", 4)]
    assert state.total_items == 7
    assert state.total_price == 3 * 30000 + 4 * 10000
    assert cart_session.is_in_cart("A")
    assert cart_session.item_quantity("B") == 4
    assert cart_session.item_quantity("Z") == 0


def test_update_quantity_to_zero_removes_item(cart_session):
    cart_session.add_item("A", price=1000)
    cart_session.add_item("B", price=1000)

    cart_session.update_quantity("A", 0)

    assert not cart_session.is_in_cart("A")
    assert [i.id for i in cart_session.load().items] == ["B"]


def test_set_checked_and_clear(cart_session):
    cart_session.add_item("A", price=1000)

    cart_session.set_checked("A", False)
    assert cart_session.load().items[0].checked is False

    cart_session.clear()
    assert cart_session.state.items == ()
    assert cart_session.load().total_items == 0


def test_failed_mutation_keeps_items_and_reraises(cart_session):
    cart_session.add_item("A", price=1000)

    with pytest.raises(CartSyncError) as exc:
        cart_session.remove_item("missing")

    assert exc.value.message == "Item not found in cart"
    assert exc.value.status_code == 404
    assert cart_session.state.error == "Item not found in cart"
    assert [i.id for i in cart_session.state.items] == ["A"]


def test_sign_in_merges_and_follows_user_cart(cart_session, customer, customer_headers):
    cart_session.add_item("A", price=1000, qty=2)
    token = customer_headers["Authorization"].split(" ", 1)[1]

    state = cart_session.sign_in(str(customer.id), token)

    assert cart_session.identity.user_id == str(customer.id)
    assert [(i.id, i.quantity) for i in state.items] == [("A", 2)]


def test_transport_error_becomes_sync_error():
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    http = httpx.Client(transport=httpx.MockTransport(refuse), base_url="http://cart.test")
    sync = CartSyncClient(http)

    with pytest.raises(CartSyncError) as exc:
        sync.get_cart(CartIdentity(cart_id="c1"))

    assert exc.value.message == "Network error occurred"
    assert exc.value.status_code is None


def test_non_json_response_is_reported():
    def html(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>Bad gateway</html>", headers={"content-type": "text/html"})

    http = httpx.Client(transport=httpx.MockTransport(html), base_url="http://cart.test")

    with pytest.raises(CartSyncError) as exc:
        CartSyncClient(http).clear_cart(CartIdentity(cart_id="c1"))

    assert "Expected JSON response" in exc.value.message


def test_load_failure_is_recorded_not_raised():
    def boom(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"ok": False, "error": "Internal server error"})

    http = httpx.Client(transport=httpx.MockTransport(boom), base_url="http://cart.test")
    session = CartSession(CartSyncClient(http), CartIdentity(cart_id="c1"))

    state = session.load()

    assert state.error == "Internal server error"
    assert state.loading is False
