"""API tests for the create-order endpoint.

These tests exercise ``POST /api/orders/`` end to end against the test
database: successful creation, insufficient stock, unknown and inactive
products, empty orders, payload validation and unclassified failures.
"""
import re

import pytest

from apps.orders.domain import OrderService
from apps.orders.models import OrderModel
from apps.orders.repository import OrderRepository
from apps.products.models import ProductModel
from apps.products.repository import ProductRepository


CREATE_URL = "/api/orders/"


def post(client, payload, **headers):
    return client.post(CREATE_URL, data=payload, content_type="application/json", **headers)


@pytest.mark.django_db
def test_create_order_returns_hydrated_order(client, make_product, order_payload):
    """Two shirts at 29.99 against a stock of 100."""
    p = make_product(price="29.99", stock=100)
    r = post(client, order_payload((p.id, 2)))
    assert r.status_code == 201
    body = r.json()

    assert re.match(r"^ORD-\d{13}-\d{3}$", body["orderNumber"])
    assert body["status"] == "pending"
    assert body["customerEmail"] == "a@b.com"
    assert body["subtotal"] == "59.98"
    assert body["taxAmount"] == "0.00"
    assert body["shippingCost"] == "0.00"
    assert body["totalAmount"] == "59.98"
    assert body["currency"] == "USD"

    [item] = body["orderItems"]
    assert item["productId"] == str(p.id)
    assert item["productName"] == "Organic Cotton T-Shirt"
    assert item["productSku"] == "OCT-001"
    assert item["quantity"] == 2
    assert item["unitPrice"] == "29.99"
    assert item["totalPrice"] == "59.98"
    assert item["product"]["id"] == str(p.id)

    assert body["shipping"]["status"] == "pending"
    assert body["shipping"]["method"] == "standard"
    assert body["shipping"]["trackingNumber"] is None
    assert body["payment"]["status"] == "pending"
    assert body["payment"]["method"] == "credit_card"
    assert body["payment"]["amount"] == "59.98"
    assert body["payment"]["currency"] == "USD"
    assert body["payment"]["lastFourDigits"] == "4242"
    assert body["payment"]["gatewayTransactionId"] is None

    p.refresh_from_db()
    assert p.stock == 98


@pytest.mark.django_db
def test_create_order_insufficient_stock(client, make_product, order_payload):
    """Returns 400 and leaves stock untouched when quantity exceeds stock."""
    p = make_product(stock=100)
    r = post(client, order_payload((p.id, 101)))
    assert r.status_code == 400
    body = r.json()
    assert body["detail"] == "INSUFFICIENT_STOCK"
    assert "Available: 100, Requested: 101" in body["message"]

    p.refresh_from_db()
    assert p.stock == 100


@pytest.mark.django_db
def test_create_order_unknown_product(client, order_payload, unknown_id):
    r = post(client, order_payload((unknown_id, 1)))
    assert r.status_code == 404
    assert r.json()["detail"] == "NOT_FOUND"
    assert r.json()["id"] == str(unknown_id)


@pytest.mark.django_db
def test_create_order_inactive_product(client, make_product, order_payload):
    p = make_product(is_active=False)
    r = post(client, order_payload((p.id, 1)))
    assert r.status_code == 404
    assert r.json()["id"] == str(p.id)


@pytest.mark.django_db
@pytest.mark.parametrize("drop_items", [False, True])
def test_create_order_without_items(client, order_payload, drop_items):
    payload = order_payload()
    if drop_items:
        del payload["orderItems"]
    r = post(client, payload)
    assert r.status_code == 400
    assert r.json()["detail"] == "EMPTY_ORDER"


@pytest.mark.django_db
def test_create_order_validation_error(client, make_product, order_payload):
    """Returns 400 when the payload fails DTO validation."""
    p = make_product()
    payload = order_payload((p.id, 0), customerEmail="not-an-email")
    payload["shipping"]["method"] = "teleport"
    r = post(client, payload)
    assert r.status_code == 400
    body = r.json()
    assert body["detail"] == "VALIDATION_ERROR"
    locations = {tuple(e["loc"]) for e in body["errors"]}
    assert ("customerEmail",) in locations
    assert ("shipping", "method") in locations
    assert ("orderItems", 0, "quantity") in locations


@pytest.mark.django_db
def test_create_order_rejects_email_longer_than_column(client, make_product, order_payload):
    p = make_product(stock=5)
    email = "a" * 64 + "@" + "b" * 32 + ".com"
    assert len(email) == 101
    r = post(client, order_payload((p.id, 1), customerEmail=email))
    assert r.status_code == 400
    body = r.json()
    assert body["detail"] == "VALIDATION_ERROR"
    assert [tuple(e["loc"]) for e in body["errors"]] == [("customerEmail",)]
    assert OrderModel.objects.count() == 0


@pytest.mark.django_db
def test_create_order_unexpected_error_is_not_leaked(client, monkeypatch, make_product, order_payload):
    """Unclassified failures map to a generic 500."""
    p = make_product()

    class ExplodingService(OrderService):
        def create_order(self, request):
            raise RuntimeError("connection reset by peer at 10.0.0.7")

    monkeypatch.setattr(
        "apps.orders.providers.get_order_service",
        lambda: ExplodingService(ProductRepository(), OrderRepository()),
        raising=True,
    )
    r = post(client, order_payload((p.id, 1)))
    assert r.status_code == 500
    assert r.json() == {"detail": "INTERNAL_ERROR", "message": "Failed to create order"}
    assert "10.0.0.7" not in r.content.decode()


@pytest.mark.django_db
def test_create_order_sets_request_id_header(client, make_product, order_payload):
    p = make_product()
    r = post(client, order_payload((p.id, 1)), HTTP_X_REQUEST_ID="req-123")
    assert r.status_code == 201
    assert r.headers["X-Request-ID"] == "req-123"
    assert ProductModel.objects.get(pk=p.pk).stock == 99
