# tests/test_users_and_stats.py
import uuid

from remen_abs.models.inquiry import Inquiry
from remen_abs.models.order import Order
from tests.conftest import auth_headers


def test_first_request_provisions_profile(client):
    user_id = uuid.uuid4()

    res = client.get("/api/users/me", headers=auth_headers(user_id, "new.customer@example.com"))

    assert res.status_code == 200
    me = res.json()
    assert me["id"] == str(user_id)
    assert me["name"] == "new.customer"
    assert me["role"] == "user"


def test_invalid_token_is_401(client):
    res = client.get("/api/users/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert res.status_code == 401
    assert res.json() == {"ok": False, "error": "Invalid or expired token"}


def test_update_me(client, customer_headers):
    res = client.patch("/api/users/me", json={"name": " Kim ", "phone": "010-1111-2222"}, headers=customer_headers)

    assert res.status_code == 200
    assert res.json()["name"] == "Kim"
    assert res.json()["phone"] == "010-1111-2222"


def test_email_is_not_editable(client, customer_headers):
    res = client.patch("/api/users/me", json={"email": "x@example.com"}, headers=customer_headers)

    assert res.status_code == 400


def test_admin_changes_role(client, admin_headers, customer):
    res = client.patch(f"/api/users/{customer.id}/role", json={"role": "admin"}, headers=admin_headers)

    assert res.json()["role"] == "admin"
    listed = client.get("/api/users", params={"role": "user"}, headers=admin_headers).json()
    assert listed == []


def order_row(user_id, number, status, final_amount):
    return Order(
        order_number=number,
        user_id=user_id,
        status=status,
        customer={"name": "Kim", "email": "buyer@example.com", "phone": "010"},
        shipping={},
        payment={},
        items=[],
        total_amount=final_amount,
        shipping_fee=0,
        discount_amount=0,
        final_amount=final_amount,
    )


def test_dashboard_stats(client, session, admin_headers, customer):
    session.add(order_row(customer.id, "20240305-001", "payment_completed", 10000))
    session.add(order_row(customer.id, "20240305-002", "delivered", 5000))
    session.add(order_row(customer.id, "20240305-003", "cancelled", 7000))
    session.add(order_row(customer.id, "20240305-004", "payment_pending", 9000))
    session.add(
        Inquiry(
            name="Park",
            email="park@example.com",
            phone="010",
            car_brand="BMW",
            car_model="X5",
            message="?",
        )
    )
    session.commit()
    client.post("/api/analytics/page-views", json={"path": "/"})

    res = client.get("/api/admin/stats", headers=admin_headers)

    assert res.status_code == 200
    stats = res.json()
    assert stats["total_customers"] == 1
    assert stats["total_orders"] == 4
    assert stats["total_revenue"] == 15000
    assert stats["orders_by_status"]["cancelled"] == 1
    assert len(stats["latest_orders"]) == 4
    assert stats["latest_orders"][0]["customer_name"] == "Kim"
    assert stats["total_visitors"] == 1
    assert stats["pending_inquiries"] == 1


def test_dashboard_requires_admin(client, customer_headers):
    assert client.get("/api/admin/stats", headers=customer_headers).status_code == 403
