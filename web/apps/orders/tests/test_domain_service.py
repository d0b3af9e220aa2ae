"""Unit tests for the OrderService domain orchestration.

These tests drive order creation against ``InMemoryStore`` so they need
no database: happy path, empty orders, unknown and inactive products,
insufficient stock, rollback on a failing write, and order-number
collisions.
"""

import dataclasses
import random
import uuid
from decimal import Decimal

import pytest

from apps.orders.adapters import InMemoryStore
from apps.orders.domain import (
    CreateOrderRequest,
    OrderLine,
    OrderService,
    OrderStatus,
    PaymentDetails,
    PaymentMethod,
    PaymentStatus,
    ShippingDetails,
    ShippingMethod,
    ShippingStatus,
)
from apps.orders.errors import DuplicateOrderNumber, InsufficientStock, InvalidRequest, NotFound
from apps.orders.numbering import OrderNumberGenerator
from apps.products.domain import Product


class FixedNumbers:
    """Order number generator returning a scripted sequence."""
    def __init__(self, *numbers):
        self._numbers = iter(numbers)
    def generate(self):
        return next(self._numbers)


def shirt(**overrides):
    fields = dict(id=uuid.uuid4(), name="Organic Cotton T-Shirt", sku="OCT-001", price=Decimal("29.99"), stock=100)
    fields.update(overrides)
    return Product(**fields)


def request_for(*lines):
    return CreateOrderRequest(
        customer_email="a@b.com",
        items=[OrderLine(product_id=pid, quantity=q) for pid, q in lines],
        shipping=ShippingDetails(
            method=ShippingMethod.STANDARD, first_name="Ada", last_name="Lovelace",
            address_line1="12 St James's Square", city="London", state="London",
            postal_code="SW1Y 4JH", country="GB",
        ),
        payment=PaymentDetails(method=PaymentMethod.CREDIT_CARD, last_four_digits="4242"),
    )


def make_service(store, numbers=None):
    numbers = numbers or OrderNumberGenerator(clock=lambda: 1_700_000_000.5, rng=random.Random(7))
    return OrderService(products=store, orders=store, numbers=numbers)


def test_create_order_happy_path():
    """Two shirts at 29.99: totals, snapshots, pending states and stock."""
    product = shirt()
    store = InMemoryStore([product])
    order = make_service(store).create_order(request_for((product.id, 2)))

    assert order.status == OrderStatus.PENDING
    assert order.subtotal == Decimal("59.98")
    assert order.tax_amount == Decimal("0") and order.shipping_cost == Decimal("0")
    assert order.total_amount == Decimal("59.98")
    assert order.currency == "USD"
    assert order.order_number.startswith("ORD-1700000000500-")

    [item] = order.order_items
    assert item.product_name == "Organic Cotton T-Shirt"
    assert item.product_sku == "OCT-001"
    assert item.unit_price == Decimal("29.99")
    assert item.total_price == Decimal("59.98")

    assert order.shipping.status == ShippingStatus.PENDING
    assert order.payment.status == PaymentStatus.PENDING
    assert order.payment.amount == order.total_amount
    assert order.payment.currency == "USD"

    assert store.products[product.id].stock == 98
    assert store.commits == 1


def test_total_matches_line_totals_and_payment_amount():
    a, b = shirt(price=Decimal("19.99"), stock=5), shirt(name="Mug", sku="MUG-1", price=Decimal("7.50"), stock=5)
    store = InMemoryStore([a, b])
    order = make_service(store).create_order(request_for((a.id, 3), (b.id, 2)))

    assert order.total_amount == sum(i.total_price for i in order.order_items) == order.payment.amount
    assert order.total_amount == Decimal("74.97")
    assert [i.product_id for i in order.order_items] == [a.id, b.id]


@pytest.mark.parametrize("items", [[], None])
def test_create_order_without_items_is_rejected(items):
    store = InMemoryStore()
    req = request_for()
    req = dataclasses.replace(req, items=items)
    with pytest.raises(InvalidRequest) as e:
        make_service(store).create_order(req)
    assert e.value.code == "EMPTY_ORDER"
    assert store.orders == {}


def test_unknown_product_raises_not_found_with_id():
    missing = uuid.uuid4()
    store = InMemoryStore()
    with pytest.raises(NotFound) as e:
        make_service(store).create_order(request_for((missing, 1)))
    assert e.value.id == missing
    assert e.value.resource == "Product"


def test_inactive_product_raises_not_found():
    product = shirt(is_active=False)
    store = InMemoryStore([product])
    with pytest.raises(NotFound):
        make_service(store).create_order(request_for((product.id, 1)))
    assert store.products[product.id].stock == 100


def test_insufficient_stock_reports_available_and_requested():
    product = shirt()
    store = InMemoryStore([product])
    with pytest.raises(InsufficientStock) as e:
        make_service(store).create_order(request_for((product.id, 101)))
    assert e.value.available == 100
    assert e.value.requested == 101
    assert "Available: 100, Requested: 101" in str(e.value)
    assert store.products[product.id].stock == 100
    assert store.orders == {}


def test_first_failing_line_aborts_validation():
    """Lines are validated in order: the stock error wins over the later unknown id."""
    product = shirt(stock=1)
    store = InMemoryStore([product])
    with pytest.raises(InsufficientStock):
        make_service(store).create_order(request_for((product.id, 2), (uuid.uuid4(), 1)))


def test_duplicate_lines_cannot_oversell():
    """Each line fits on its own but together they exceed stock."""
    product = shirt(stock=3)
    store = InMemoryStore([product])
    with pytest.raises(InsufficientStock) as e:
        make_service(store).create_order(request_for((product.id, 2), (product.id, 2)))
    assert e.value.available == 1
    assert store.products[product.id].stock == 3
    assert store.orders == {}
    assert store.rollbacks == 1


def test_failing_write_rolls_back_everything():
    product = shirt()

    class BrokenPayments(InMemoryStore):
        def add_payment(self, *args, **kwargs):
            raise RuntimeError("payments table unavailable")

    store = BrokenPayments([product])
    with pytest.raises(RuntimeError, match="payments table unavailable"):
        make_service(store).create_order(request_for((product.id, 2)))
    assert store.orders == {}
    assert store.products[product.id].stock == 100


def test_order_number_collision_is_retried():
    product = shirt()
    store = InMemoryStore([product])
    numbers = FixedNumbers("ORD-1700000000000-001", "ORD-1700000000000-001", "ORD-1700000000000-002")
    service = make_service(store, numbers)

    first = service.create_order(request_for((product.id, 1)))
    second = service.create_order(request_for((product.id, 1)))

    assert first.order_number == "ORD-1700000000000-001"
    assert second.order_number == "ORD-1700000000000-002"
    assert store.products[product.id].stock == 98


def test_order_number_collisions_exhaust_attempts():
    product = shirt()
    store = InMemoryStore([product])
    service = OrderService(
        products=store, orders=store,
        numbers=FixedNumbers(*["ORD-1700000000000-001"] * 4),
        max_number_attempts=3,
    )
    service.create_order(request_for((product.id, 1)))
    with pytest.raises(DuplicateOrderNumber):
        service.create_order(request_for((product.id, 1)))
    assert len(store.orders) == 1
    assert store.products[product.id].stock == 99


def test_find_one_unknown_order():
    with pytest.raises(NotFound) as e:
        make_service(InMemoryStore()).find_one(uuid.uuid4())
    assert e.value.resource == "Order"


def test_find_all_returns_newest_first():
    product = shirt()
    store = InMemoryStore([product])
    service = make_service(store, FixedNumbers("ORD-1700000000000-001", "ORD-1700000000000-002"))
    first = service.create_order(request_for((product.id, 1)))
    second = service.create_order(request_for((product.id, 1)))

    assert [o.id for o in service.find_all()] == [second.id, first.id]
