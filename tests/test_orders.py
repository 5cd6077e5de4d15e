# tests/test_orders.py
import uuid

import pytest
from sqlmodel import select

from remen_abs.models.order import Order
from remen_abs.models.product import Product
from remen_abs.routers import orders as orders_router
from remen_abs.services.order_service import calculate_discount, calculate_shipping_fee
from remen_abs.services.payment_service import PaymentResponse
from tests.conftest import auth_headers

CHECKOUT = {
    "customer": {"name": "Kim", "email": "buyer@example.com", "phone": "010-1234-5678"},
    "shipping": {
        "method": "standard",
        "recipient": {
            "name": "Kim",
            "phone": "010-1234-5678",
            "address": {"postal_code": "06236", "address1": "Teheran-ro 1"},
        },
    },
    "payment_method": "card",
}


@pytest.fixture
def sent_mail(monkeypatch):
    sent = []
    monkeypatch.setattr(orders_router.service, "mailer", lambda **kw: sent.append(kw))
    return sent


def fill_cart(client, user, headers, products, qty=1):
    for product in products:
        res = client.post(
            "/api/addItem",
            json={
                "cartId": "guest-1",
                "userId": str(user.id),
                "sku": str(product.id),
                "qty": qty,
                "priceAtAdd": product.price,
                "name": product.name,
                "brand": product.brand,
                "model": product.model,
            },
            headers=headers,
        )
        assert res.status_code == 200


@pytest.mark.parametrize(
    "method, subtotal, fee",
    [
        ("standard", 45000, 3000),
        ("standard", 50000, 0),
        ("standard", 60000, 0),
        ("express", 60000, 5000),
        ("express", 100000, 0),
        ("pickup", 10000, 0),
        ("drone", 10000, 3000),
    ],
)
def test_shipping_fee(method, subtotal, fee):
    assert calculate_shipping_fee(method, subtotal) == fee


def test_coupon_discount():
    assert calculate_discount(10000, "WELCOME10") == 1000
    assert calculate_discount(12345, "WELCOME10") == 1234
    assert calculate_discount(10000, "WELCOME20") == 0
    assert calculate_discount(10000, None) == 0


def test_checkout_requires_login(client):
    res = client.post("/api/orders/checkout", json=CHECKOUT)

    assert res.status_code == 401


def test_checkout_with_empty_cart_is_400(client, customer_headers):
    res = client.post("/api/orders/checkout", json=CHECKOUT, headers=customer_headers)

    assert res.status_code == 400
    assert res.json()["error"] == "No items selected for checkout"


def test_checkout_creates_paid_order(client, session, customer, customer_headers, make_product, sent_mail):
    product = make_product(price=45000)
    fill_cart(client, customer, customer_headers, [product])

    res = client.post(
        "/api/orders/checkout",
        json={**CHECKOUT, "coupon_code": "WELCOME10"},
        headers=customer_headers,
    )

    assert res.status_code == 201
    order = res.json()
    assert order["status"] == "payment_completed"
    assert order["total_amount"] == 45000
    assert order["shipping_fee"] == 3000
    assert order["discount_amount"] == 4500
    assert order["final_amount"] == 43500
    assert order["payment"]["status"] == "completed"
    assert order["payment"]["transaction_id"].startswith("toss_")
    assert order["items"][0]["order_price"] == 45000
    assert len(order["order_number"].split("-")[1]) == 3

    session.expire_all()
    sold = session.get(Product, product.id)
    assert sold.sold_out is True
    assert sold.in_stock is False

    cart = client.post(
        "/api/getUserCart",
        json={"cartId": "guest-1", "userId": str(customer.id)},
        headers=customer_headers,
    ).json()["cart"]
    assert cart["items"] == []

    assert sent_mail[0]["to_email"] == "buyer@example.com"


def test_checkout_only_takes_checked_lines(client, customer, customer_headers, make_product, sent_mail):
    keep = make_product(name="Keep", price=20000)
    skip = make_product(name="Skip", price=30000)
    fill_cart(client, customer, customer_headers, [keep, skip])
    client.post(
        "/api/updateItem",
        json={"cartId": "guest-1", "userId": str(customer.id), "sku": str(skip.id), "checked": False},
        headers=customer_headers,
    )

    order = client.post("/api/orders/checkout", json=CHECKOUT, headers=customer_headers).json()

    assert [it["sku"] for it in order["items"]] == [str(keep.id)]
    assert order["total_amount"] == 20000


def test_order_snapshot_is_independent_of_cart(client, customer, customer_headers, make_product, sent_mail):
    product = make_product(price=10000)
    fill_cart(client, customer, customer_headers, [product], qty=2)

    order = client.post("/api/orders/checkout", json=CHECKOUT, headers=customer_headers).json()
    fill_cart(client, customer, customer_headers, [product], qty=5)

    stored = client.get(f"/api/orders/me/{order['id']}", headers=customer_headers).json()
    assert stored["items"][0]["quantity"] == 2


def test_email_failure_does_not_fail_order(client, monkeypatch, customer, customer_headers, make_product):
    def broken_mailer(**kwargs):
        raise RuntimeError("SMTP is not configured")

    monkeypatch.setattr(orders_router.service, "mailer", broken_mailer)
    product = make_product()
    fill_cart(client, customer, customer_headers, [product])

    res = client.post("/api/orders/checkout", json=CHECKOUT, headers=customer_headers)

    assert res.status_code == 201
    assert res.json()["status"] == "payment_completed"


def test_payment_failure_keeps_order_pending(client, session, monkeypatch, customer, customer_headers, make_product):
    gateway = orders_router.service.payments.gateway("toss")
    monkeypatch.setattr(
        gateway,
        "request_payment",
        lambda request: PaymentResponse(success=False, error_code="DECLINED", error_message="Card declined"),
    )
    product = make_product()
    fill_cart(client, customer, customer_headers, [product])

    res = client.post("/api/orders/checkout", json=CHECKOUT, headers=customer_headers)

    assert res.status_code == 402
    assert res.json() == {"ok": False, "error": "Payment failed: Card declined"}

    session.expire_all()
    order = session.exec(select(Order)).one()
    assert order.status == "payment_pending"
    assert order.payment["status"] == "failed"
    assert session.get(Product, product.id).sold_out is False


def test_order_history(client, customer, customer_headers, make_product, sent_mail):
    fill_cart(client, customer, customer_headers, [make_product()])
    client.post("/api/orders/checkout", json=CHECKOUT, headers=customer_headers)

    res = client.get("/api/orders/me", headers=customer_headers)

    assert res.status_code == 200
    history = res.json()
    assert len(history) == 1
    assert history[0]["item_count"] == 1


def test_other_users_order_is_404(client, customer, customer_headers, make_product, sent_mail):
    fill_cart(client, customer, customer_headers, [make_product()])
    order = client.post("/api/orders/checkout", json=CHECKOUT, headers=customer_headers).json()

    stranger = auth_headers(uuid.uuid4(), "stranger@example.com")
    res = client.get(f"/api/orders/me/{order['id']}", headers=stranger)

    assert res.status_code == 404


class TestStatusTransitions:
    @pytest.fixture
    def paid_order(self, client, customer, customer_headers, make_product, sent_mail):
        fill_cart(client, customer, customer_headers, [make_product()])
        return client.post("/api/orders/checkout", json=CHECKOUT, headers=customer_headers).json()

    def patch(self, client, headers, order_id, **body):
        return client.patch(f"/api/orders/{order_id}/status", json=body, headers=headers)

    def test_customer_cannot_change_status(self, client, customer_headers, paid_order):
        res = self.patch(client, customer_headers, paid_order["id"], status="processing")

        assert res.status_code == 403

    def test_happy_path_to_delivered(self, client, admin_headers, paid_order):
        oid = paid_order["id"]

        assert self.patch(client, admin_headers, oid, status="processing").status_code == 200
        res = self.patch(client, admin_headers, oid, status="shipped", tracking_number="CJ123")
        assert res.json()["tracking_number"] == "CJ123"
        res = self.patch(client, admin_headers, oid, status="delivered")
        assert res.json()["status"] == "delivered"

    def test_invalid_transition_is_400(self, client, admin_headers, paid_order):
        res = self.patch(client, admin_headers, paid_order["id"], status="delivered")

        assert res.status_code == 400
        assert res.json()["error"] == "Invalid status transition: payment_completed -> delivered"

    def test_terminal_states_stay_terminal(self, client, admin_headers, paid_order):
        oid = paid_order["id"]
        self.patch(client, admin_headers, oid, status="cancelled")

        res = self.patch(client, admin_headers, oid, status="processing")

        assert res.status_code == 400

    def test_refund_settles_payment(self, client, admin_headers, paid_order):
        res = self.patch(client, admin_headers, paid_order["id"], status="refunded")

        assert res.status_code == 200
        assert res.json()["payment"]["status"] == "refunded"

    def test_admin_list_and_delete(self, client, admin_headers, paid_order):
        listed = client.get("/api/orders", headers=admin_headers).json()
        assert [o["id"] for o in listed] == [paid_order["id"]]

        filtered = client.get(
            "/api/orders", params={"status_filter": "shipped"}, headers=admin_headers
        ).json()
        assert filtered == []

        res = client.delete(f"/api/orders/{paid_order['id']}", headers=admin_headers)
        assert res.status_code == 204
        assert client.get(f"/api/orders/{paid_order['id']}", headers=admin_headers).status_code == 404
