"""Integration tests asserting what the create endpoint leaves in the DB.

Successful orders must persist every dependent row with consistent
amounts; failing ones must leave no trace, including stock updates.
Low-level SQL is used for some checks to avoid coupling to the ORM.
"""

from decimal import Decimal
from uuid import UUID

import pytest
from django.db import connection

from apps.orders.models import OrderItemModel, OrderModel, PaymentModel, ShippingModel
from apps.orders.repository import OrderRepository

CREATE_URL = "/api/orders/"


def post(client, payload):
    return client.post(CREATE_URL, data=payload, content_type="application/json")


def assert_nothing_persisted():
    assert OrderModel.objects.count() == 0
    assert OrderItemModel.objects.count() == 0
    assert ShippingModel.objects.count() == 0
    assert PaymentModel.objects.count() == 0


@pytest.mark.django_db
def test_create_persists_order_and_dependents(client, make_product, order_payload):
    shirt = make_product(price=Decimal("29.99"), stock=10)
    mug = make_product(name="Mug", sku="MUG-1", price=Decimal("7.50"), stock=4)

    r = post(client, order_payload((shirt.id, 3), (mug.id, 4)))
    assert r.status_code == 201
    oid = UUID(r.json()["id"])

    with connection.cursor() as cur:
        cur.execute("select status, subtotal, total_amount, currency from orders where id = %s", [oid.hex])
        row = cur.fetchone()
    assert row is not None

    order = OrderModel.objects.get(pk=oid)
    assert order.status == "pending"
    assert order.total_amount == Decimal("119.97")
    items = list(order.order_items.order_by("position"))
    assert [i.product_id for i in items] == [shirt.id, mug.id]
    assert sum(i.total_price for i in items) == order.total_amount
    assert order.payment.amount == order.total_amount
    assert order.shipping.order_id == order.id

    shirt.refresh_from_db()
    mug.refresh_from_db()
    assert (shirt.stock, mug.stock) == (7, 0)


@pytest.mark.django_db
def test_failed_write_rolls_back_everything(client, monkeypatch, make_product, order_payload):
    """A failure after the order, items and shipping are written undoes them all."""
    p = make_product(stock=100)

    def broken_add_payment(self, *args, **kwargs):
        raise RuntimeError("payments table unavailable")

    monkeypatch.setattr(OrderRepository, "add_payment", broken_add_payment)
    r = post(client, order_payload((p.id, 2)))
    assert r.status_code == 500
    assert r.json()["detail"] == "INTERNAL_ERROR"

    assert_nothing_persisted()
    p.refresh_from_db()
    assert p.stock == 100


@pytest.mark.django_db
def test_stock_failure_on_second_line_rolls_back_first(client, make_product, order_payload):
    ok = make_product(stock=5)
    short = make_product(name="Mug", sku="MUG-1", stock=1)

    r = post(client, order_payload((ok.id, 2), (short.id, 3)))
    assert r.status_code == 400

    assert_nothing_persisted()
    ok.refresh_from_db()
    assert ok.stock == 5


@pytest.mark.django_db
def test_duplicate_lines_cannot_oversell(client, make_product, order_payload):
    p = make_product(stock=3)
    r = post(client, order_payload((p.id, 2), (p.id, 2)))
    assert r.status_code == 400
    assert r.json()["detail"] == "INSUFFICIENT_STOCK"
    assert "Available: 1, Requested: 2" in r.json()["message"]

    assert_nothing_persisted()
    p.refresh_from_db()
    assert p.stock == 3


@pytest.mark.django_db
def test_item_snapshot_survives_product_changes(client, make_product, order_payload):
    p = make_product(price=Decimal("29.99"))
    r = post(client, order_payload((p.id, 1)))
    oid = r.json()["id"]

    p.name = "Renamed Shirt"
    p.price = Decimal("99.00")
    p.save()

    body = client.get(f"/api/orders/{oid}/").json()
    [item] = body["orderItems"]
    assert item["productName"] == "Organic Cotton T-Shirt"
    assert item["unitPrice"] == "29.99"
    assert item["product"]["name"] == "Renamed Shirt"
