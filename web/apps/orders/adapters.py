"""In-process adapters for the orders domain ports.

``InMemoryStore`` implements both ``ProductCatalogPort`` and
``OrderRepositoryPort`` without a database. It is intended for unit tests
and local experiments where deterministic behavior is useful. The unit of
work snapshots the whole store on entry and restores it if the block
raises, which gives the same all-or-nothing semantics as a database
transaction for a single thread.
"""

import copy
import dataclasses
import itertools
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from apps.products.domain import Product

from .domain import (
    NewOrder,
    Order,
    OrderItem,
    Payment,
    PaymentDetails,
    PaymentStatus,
    PricedLine,
    Shipping,
    ShippingDetails,
    ShippingStatus,
)
from .errors import DuplicateOrderNumber


class InMemoryStore:
    """Dictionary-backed catalog and order store.

    Products are added with ``add_product``; orders are only ever written
    through the port methods used by ``OrderService``.
    """

    def __init__(self, products: Optional[List[Product]] = None):
        self.products: Dict[uuid.UUID, Product] = {p.id: p for p in products or []}
        self.orders: Dict[uuid.UUID, Order] = {}
        self._seq = itertools.count(1)
        self._created: Dict[uuid.UUID, int] = {}
        self.commits = 0
        self.rollbacks = 0

    def add_product(self, product: Product) -> Product:
        self.products[product.id] = product
        return product

    # ---- unit of work ----
    @contextmanager
    def atomic(self):
        snapshot = copy.deepcopy((self.products, self.orders, self._created))
        try:
            yield
        except BaseException:
            self.products, self.orders, self._created = snapshot
            self.rollbacks += 1
            raise
        self.commits += 1

    # ---- ProductCatalogPort ----
    def get_active(self, product_id: uuid.UUID) -> Optional[Product]:
        product = self.products.get(product_id)
        if product is None or not product.is_active:
            return None
        return product

    def decrement_stock(self, product_id: uuid.UUID, quantity: int) -> bool:
        product = self.products.get(product_id)
        if product is None or product.stock < quantity:
            return False
        self.products[product_id] = dataclasses.replace(product, stock=product.stock - quantity)
        return True

    # ---- OrderRepositoryPort ----
    def create_order(self, new_order: NewOrder) -> uuid.UUID:
        if any(o.order_number == new_order.order_number for o in self.orders.values()):
            raise DuplicateOrderNumber(new_order.order_number)
        now = datetime.now(timezone.utc)
        order = Order(
            id=uuid.uuid4(),
            order_number=new_order.order_number,
            customer_email=new_order.customer_email,
            customer_name=new_order.customer_name,
            customer_phone=new_order.customer_phone,
            status=new_order.status,
            subtotal=new_order.subtotal,
            tax_amount=new_order.tax_amount,
            shipping_cost=new_order.shipping_cost,
            total_amount=new_order.total_amount,
            currency=new_order.currency,
            notes=new_order.notes,
            created_at=now,
            updated_at=now,
        )
        self.orders[order.id] = order
        self._created[order.id] = next(self._seq)
        return order.id

    def add_items(self, order_id: uuid.UUID, items: List[PricedLine]) -> None:
        order = self.orders[order_id]
        for item in items:
            order.order_items.append(
                OrderItem(
                    id=uuid.uuid4(),
                    order_id=order_id,
                    product_id=item.product_id,
                    product_name=item.product.name,
                    product_sku=item.product.sku,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    total_price=item.total_price,
                    product=item.product,
                )
            )

    def add_shipping(self, order_id: uuid.UUID, shipping: ShippingDetails) -> None:
        fields = dataclasses.asdict(shipping)
        self.orders[order_id].shipping = Shipping(
            id=uuid.uuid4(), order_id=order_id, status=ShippingStatus.PENDING, **fields
        )

    def add_payment(self, order_id: uuid.UUID, payment: PaymentDetails, amount: Decimal, currency: str) -> None:
        fields = dataclasses.asdict(payment)
        self.orders[order_id].payment = Payment(
            id=uuid.uuid4(),
            order_id=order_id,
            status=PaymentStatus.PENDING,
            amount=amount,
            currency=currency,
            **fields,
        )

    def get(self, order_id: uuid.UUID) -> Optional[Order]:
        order = self.orders.get(order_id)
        return copy.deepcopy(order) if order else None

    def list(self) -> List[Order]:
        ids = sorted(self.orders, key=lambda oid: self._created[oid], reverse=True)
        return [copy.deepcopy(self.orders[oid]) for oid in ids]
