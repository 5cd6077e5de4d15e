# tests/test_inquiries.py
INQUIRY = {
    "name": "Park",
    "email": "park@example.com",
    "phone": "010-0000-0000",
    "car_brand": "Lexus",
    "car_model": "ES300h",
    "message": "ABS warning light stays on after a module swap.",
}


def test_guest_submits_inquiry(client):
    res = client.post("/api/inquiries", json=INQUIRY)

    assert res.status_code == 201
    assert res.json()["status"] == "pending"


def test_blank_message_is_rejected(client):
    res = client.post("/api/inquiries", json={**INQUIRY, "message": "   "})

    assert res.status_code == 400


def test_listing_requires_admin(client, customer_headers):
    assert client.get("/api/inquiries").status_code == 401
    assert client.get("/api/inquiries", headers=customer_headers).status_code == 403


def test_admin_moves_inquiry_along(client, admin_headers):
    created = client.post("/api/inquiries", json=INQUIRY).json()

    res = client.patch(
        f"/api/inquiries/{created['id']}/status",
        json={"status": "processing"},
        headers=admin_headers,
    )
    assert res.json()["status"] == "processing"

    pending = client.get(
        "/api/inquiries", params={"status_filter": "pending"}, headers=admin_headers
    ).json()
    assert pending == []
    assert len(client.get("/api/inquiries", headers=admin_headers).json()) == 1


def test_unknown_status_is_rejected(client, admin_headers):
    created = client.post("/api/inquiries", json=INQUIRY).json()

    res = client.patch(
        f"/api/inquiries/{created['id']}/status",
        json={"status": "archived"},
        headers=admin_headers,
    )

    assert res.status_code == 400
