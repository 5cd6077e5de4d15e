# tests/test_products.py
import uuid

import pytest

from remen_abs.services import product_service

NEW_PRODUCT = {
    "name": "BMW X5 ABS Module",
    "brand": "BMW",
    "model": "X5",
    "year": "2019",
    "price": 450000,
    "features": ["bench tested", "6 month warranty"],
    "inspection_results": {
        "brakeTest": "pass",
        "absTest": "pass",
        "pressureTest": "pass",
        "electricalTest": "pass",
    },
}


@pytest.fixture
def storage(monkeypatch):
    uploaded: dict[str, bytes] = {}
    deleted: list[str] = []

    def fake_upload(path, file_bytes, content_type):
        uploaded[path] = file_bytes
        return f"https://example.supabase.co/storage/v1/object/public/products/{path}"

    monkeypatch.setattr(product_service, "upload_to_storage", fake_upload)
    monkeypatch.setattr(product_service, "delete_public_urls", lambda urls: deleted.extend(urls))
    return uploaded, deleted


def test_admin_creates_product(client, admin_headers):
    res = client.post("/api/products", json=NEW_PRODUCT, headers=admin_headers)

    assert res.status_code == 201
    product = res.json()
    assert product["sold_out"] is False
    assert product["in_stock"] is True
    assert product["inspection_results"]["absTest"] == "pass"


def test_customer_cannot_create_product(client, customer_headers):
    res = client.post("/api/products", json=NEW_PRODUCT, headers=customer_headers)

    assert res.status_code == 403
    assert res.json() == {"ok": False, "error": "Admin access required"}


def test_invalid_product_is_400(client, admin_headers):
    res = client.post("/api/products", json={**NEW_PRODUCT, "price": 0}, headers=admin_headers)

    assert res.status_code == 400
    assert res.json()["error"].startswith("price:")


def test_public_listing_and_brand_filter(client, make_product):
    make_product(brand="BMW")
    make_product(brand="Lexus")
    make_product(brand="BMW", sold_out=True, in_stock=False)

    assert len(client.get("/api/products").json()) == 3
    assert len(client.get("/api/products", params={"brand": "BMW"}).json()) == 2
    available = client.get("/api/products", params={"brand": "BMW", "available_only": True}).json()
    assert len(available) == 1


def test_get_unknown_product_is_404(client):
    res = client.get(f"/api/products/{uuid.uuid4()}")

    assert res.status_code == 404
    assert res.json()["error"] == "Product not found"


def test_partial_update_and_sold_out(client, admin_headers, make_product):
    product = make_product(price=1000)

    res = client.patch(f"/api/products/{product.id}", json={"price": 2000}, headers=admin_headers)
    assert res.json()["price"] == 2000
    assert res.json()["name"] == product.name

    res = client.post(f"/api/products/{product.id}/sold-out", headers=admin_headers)
    assert res.json()["sold_out"] is True
    assert res.json()["in_stock"] is False


def test_image_upload_and_delete(client, admin_headers, make_product, storage):
    uploaded, deleted = storage
    product = make_product()

    res = client.post(
        f"/api/products/{product.id}/image",
        files={"file": ("main.png", b"\x89PNG", "image/png")},
        headers=admin_headers,
    )
    assert res.status_code == 200
    assert res.json()["image_url"].endswith(f"{product.id}/main.png")

    res = client.post(
        f"/api/products/{product.id}/gallery",
        files=[
            ("files", ("a.jpg", b"jpg-a", "image/jpeg")),
            ("files", ("b.webp", b"webp-b", "image/webp")),
        ],
        headers=admin_headers,
    )
    gallery = res.json()["image_urls"]
    assert len(gallery) == 2
    assert len(uploaded) == 3

    res = client.delete(
        f"/api/products/{product.id}/gallery",
        params={"url": gallery[0]},
        headers=admin_headers,
    )
    assert res.json()["image_urls"] == gallery[1:]
    assert deleted == [gallery[0]]


def test_unsupported_image_type_is_rejected(client, admin_headers, make_product, storage):
    product = make_product()

    res = client.post(
        f"/api/products/{product.id}/image",
        files={"file": ("doc.pdf", b"%PDF", "application/pdf")},
        headers=admin_headers,
    )

    assert res.status_code == 400


def test_delete_product_removes_images(client, admin_headers, make_product, storage):
    _, deleted = storage
    image_url = "https://example.supabase.co/storage/v1/object/public/products/x/main.jpg"
    product = make_product(image_url=image_url)

    res = client.delete(f"/api/products/{product.id}", headers=admin_headers)

    assert res.status_code == 204
    assert deleted == [image_url]
    assert client.get(f"/api/products/{product.id}").status_code == 404
