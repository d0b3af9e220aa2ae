"""Domain models, ports and service for orders.

This module contains the dataclasses used as DTOs for orders, protocol
definitions (ports) for the product catalog and order persistence, and
the domain service that validates, prices and writes an order as one
atomic unit.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import ContextManager, List, Optional, Protocol

from apps.products.domain import Product

from .errors import DuplicateOrderNumber, InsufficientStock, InvalidRequest, NotFound
from .numbering import OrderNumberGenerator

logger = logging.getLogger("orders")

ZERO = Decimal("0.00")
DEFAULT_CURRENCY = "USD"


# ---- Enums ----
class OrderStatus(str, Enum):
    """Lifecycle of an order. New orders start as PENDING."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class ShippingMethod(str, Enum):
    STANDARD = "standard"
    EXPRESS = "express"
    OVERNIGHT = "overnight"
    PICKUP = "pickup"


class ShippingStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    FAILED = "failed"
    RETURNED = "returned"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    PAYPAL = "paypal"
    STRIPE = "stripe"
    BANK_TRANSFER = "bank_transfer"
    CASH = "cash"
    CHECK = "check"
    CRYPTOCURRENCY = "cryptocurrency"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"


# ---- Requests ----
@dataclass(frozen=True)
class OrderLine:
    """A requested (product, quantity) pair."""

    product_id: uuid.UUID
    quantity: int


@dataclass(frozen=True)
class ShippingDetails:
    """Shipping block of a create-order request."""

    method: ShippingMethod
    first_name: str
    last_name: str
    address_line1: str
    city: str
    state: str
    postal_code: str
    country: str
    address_line2: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class PaymentDetails:
    """Payment block of a create-order request.

    Card data is masked: only the last four digits, brand and expiry
    are ever accepted.
    """

    method: PaymentMethod
    last_four_digits: Optional[str] = None
    card_brand: Optional[str] = None
    expiry_month: Optional[str] = None
    expiry_year: Optional[str] = None
    billing_first_name: Optional[str] = None
    billing_last_name: Optional[str] = None
    billing_address_line1: Optional[str] = None
    billing_address_line2: Optional[str] = None
    billing_city: Optional[str] = None
    billing_state: Optional[str] = None
    billing_postal_code: Optional[str] = None
    billing_country: Optional[str] = None


@dataclass(frozen=True)
class CreateOrderRequest:
    """Everything needed to place an order.

    ``items`` may be None or empty; the service rejects both.
    """

    customer_email: str
    items: Optional[List[OrderLine]]
    shipping: ShippingDetails
    payment: PaymentDetails
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    notes: Optional[str] = None


# ---- Pricing ----
@dataclass(frozen=True)
class PricedLine:
    """A validated line carrying the product snapshot taken at order time."""

    product_id: uuid.UUID
    quantity: int
    product: Product

    @property
    def unit_price(self) -> Decimal:
        return self.product.price

    @property
    def total_price(self) -> Decimal:
        return self.product.price * self.quantity


@dataclass(frozen=True)
class PricedOrder:
    """Result of validating and pricing the requested lines.

    Tax and shipping cost are placeholders and always zero for now.
    """

    items: List[PricedLine]
    subtotal: Decimal
    tax_amount: Decimal = ZERO
    shipping_cost: Decimal = ZERO

    @property
    def total_amount(self) -> Decimal:
        return self.subtotal + self.tax_amount + self.shipping_cost


@dataclass(frozen=True)
class NewOrder:
    """Column values of the order row written by ``create_order``."""

    order_number: str
    customer_email: str
    subtotal: Decimal
    tax_amount: Decimal
    shipping_cost: Decimal
    total_amount: Decimal
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    notes: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    currency: str = DEFAULT_CURRENCY


# ---- Read models ----
@dataclass
class OrderItem:
    id: uuid.UUID
    order_id: uuid.UUID
    product_id: Optional[uuid.UUID]
    product_name: str
    product_sku: Optional[str]
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    product: Optional[Product] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Shipping:
    id: uuid.UUID
    order_id: uuid.UUID
    method: ShippingMethod
    status: ShippingStatus
    first_name: str
    last_name: str
    address_line1: str
    city: str
    state: str
    postal_code: str
    country: str
    address_line2: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    carrier: Optional[str] = None
    tracking_number: Optional[str] = None
    estimated_delivery_date: Optional[datetime] = None
    shipped_date: Optional[datetime] = None
    delivered_date: Optional[datetime] = None
    weight: Optional[Decimal] = None
    weight_unit: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Payment:
    id: uuid.UUID
    order_id: uuid.UUID
    method: PaymentMethod
    status: PaymentStatus
    amount: Decimal
    currency: str
    last_four_digits: Optional[str] = None
    card_brand: Optional[str] = None
    expiry_month: Optional[str] = None
    expiry_year: Optional[str] = None
    billing_first_name: Optional[str] = None
    billing_last_name: Optional[str] = None
    billing_address_line1: Optional[str] = None
    billing_address_line2: Optional[str] = None
    billing_city: Optional[str] = None
    billing_state: Optional[str] = None
    billing_postal_code: Optional[str] = None
    billing_country: Optional[str] = None
    gateway_transaction_id: Optional[str] = None
    gateway_reference: Optional[str] = None
    gateway_name: Optional[str] = None
    processed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    failure_reason: Optional[str] = None
    refunded_amount: Decimal = ZERO
    refunded_at: Optional[datetime] = None
    refund_reason: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Order:
    """A fully hydrated order as returned by the reader.

    Attributes:
        id: Persistent identifier.
        order_number: Unique human-readable number (``ORD-...``).
        status: Current OrderStatus.
        subtotal: Sum of the line totals.
        total_amount: subtotal + tax_amount + shipping_cost.
        order_items: Lines in request order.
        shipping: The single shipping record of the order.
        payment: The single payment record of the order.
    """

    id: uuid.UUID
    order_number: str
    customer_email: str
    status: OrderStatus
    subtotal: Decimal
    tax_amount: Decimal
    shipping_cost: Decimal
    total_amount: Decimal
    currency: str
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    notes: Optional[str] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    order_items: List[OrderItem] = field(default_factory=list)
    shipping: Optional[Shipping] = None
    payment: Optional[Payment] = None


# ---- Ports (DIP) ----
class ProductCatalogPort(Protocol):
    """Port describing the product lookup/lock operations used by the domain.

    Both methods run inside the transaction opened by
    ``OrderRepositoryPort.atomic``.
    """

    def get_active(self, product_id: uuid.UUID) -> Optional[Product]:
        """Return the active product with this id, locked for update, or None."""
        raise NotImplementedError()

    def decrement_stock(self, product_id: uuid.UUID, quantity: int) -> bool:
        """Subtract ``quantity`` only if enough stock is left.

        Returns:
            True if stock was decremented, False otherwise.
        """
        raise NotImplementedError()


class OrderRepositoryPort(Protocol):
    """Port describing transactional order persistence."""

    def atomic(self) -> ContextManager[None]:
        """Open a unit of work: commit on normal exit, roll back on error."""
        raise NotImplementedError()

    def create_order(self, new_order: NewOrder) -> uuid.UUID:
        """Insert the order row and return its id.

        Raises:
            DuplicateOrderNumber: If the order number is already taken.
        """
        raise NotImplementedError()

    def add_items(self, order_id: uuid.UUID, items: List[PricedLine]) -> None:
        raise NotImplementedError()

    def add_shipping(self, order_id: uuid.UUID, shipping: ShippingDetails) -> None:
        raise NotImplementedError()

    def add_payment(self, order_id: uuid.UUID, payment: PaymentDetails, amount: Decimal, currency: str) -> None:
        raise NotImplementedError()

    def get(self, order_id: uuid.UUID) -> Optional[Order]:
        raise NotImplementedError()

    def list(self) -> List[Order]:
        """Return every order, newest first."""
        raise NotImplementedError()


# ---- Domain service ----
class OrderService:
    """Domain service responsible for creating and reading orders.

    Creation validates and prices the requested lines, then writes the
    order, its lines, shipping and payment records and decrements stock,
    all inside one unit of work opened on the order repository. Any
    failure rolls the whole unit back and the original exception is
    re-raised unchanged.
    """

    def __init__(
        self,
        products: ProductCatalogPort,
        orders: OrderRepositoryPort,
        numbers: Optional[OrderNumberGenerator] = None,
        max_number_attempts: int = 5,
    ):
        """Initialize the service with required dependencies.

        Args:
            products: ProductCatalogPort used to look up and lock products.
            orders: OrderRepositoryPort providing the unit of work.
            numbers: Generator for order numbers.
            max_number_attempts: How many order numbers to try before
                giving up on collisions.
        """
        self.products = products
        self.orders = orders
        self.numbers = numbers or OrderNumberGenerator()
        self.max_number_attempts = max_number_attempts

    def validate_and_price(self, lines: Optional[List[OrderLine]]) -> PricedOrder:
        """Validate requested lines against the catalog and compute totals.

        Lines are checked in request order and the first failure aborts.
        Must be called inside ``orders.atomic()`` so product reads are
        consistent with the writes that follow.

        Args:
            lines: Requested order lines.

        Returns:
            PricedOrder with the product snapshot of every line.

        Raises:
            InvalidRequest: 'EMPTY_ORDER' when no lines are given.
            NotFound: When a product does not exist or is inactive.
            InsufficientStock: When a product cannot cover the quantity.
        """
        if not lines:
            raise InvalidRequest("Order must contain at least one item", code="EMPTY_ORDER")

        priced: List[PricedLine] = []
        subtotal = ZERO
        for line in lines:
            product = self.products.get_active(line.product_id)
            if product is None:
                raise NotFound("Product", line.product_id)
            if product.stock < line.quantity:
                raise InsufficientStock(product.name, product.stock, line.quantity)

            item = PricedLine(product_id=line.product_id, quantity=line.quantity, product=product)
            subtotal += item.total_price
            priced.append(item)

        return PricedOrder(items=priced, subtotal=subtotal)

    def create_order(self, request: CreateOrderRequest) -> Order:
        """Place an order atomically and return it fully hydrated.

        Args:
            request: CreateOrderRequest to process.

        Returns:
            The persisted Order with items, shipping and payment attached.

        Raises:
            InvalidRequest: Empty order or insufficient stock.
            NotFound: Unknown or inactive product.
            DuplicateOrderNumber: Every attempted order number collided.
        """
        with self.orders.atomic():
            priced = self.validate_and_price(request.items)
            order_id, order_number = self._insert_order(request, priced)

            self.orders.add_items(order_id, priced.items)
            self.orders.add_shipping(order_id, request.shipping)
            self.orders.add_payment(order_id, request.payment, amount=priced.total_amount, currency=DEFAULT_CURRENCY)

            for item in priced.items:
                if not self.products.decrement_stock(item.product_id, item.quantity):
                    # Stock moved since validation, or the same product
                    # appears on several lines.
                    current = self.products.get_active(item.product_id)
                    available = current.stock if current else 0
                    raise InsufficientStock(item.product.name, available, item.quantity)

        logger.info(
            "order created",
            extra={
                "order_id": str(order_id),
                "order_number": order_number,
                "items": len(priced.items),
                "total_amount": str(priced.total_amount),
            },
        )
        return self.find_one(order_id)

    def _insert_order(self, request: CreateOrderRequest, priced: PricedOrder):
        number = None
        for attempt in range(1, self.max_number_attempts + 1):
            number = self.numbers.generate()
            new_order = NewOrder(
                order_number=number,
                customer_email=request.customer_email,
                customer_name=request.customer_name,
                customer_phone=request.customer_phone,
                notes=request.notes,
                subtotal=priced.subtotal,
                tax_amount=priced.tax_amount,
                shipping_cost=priced.shipping_cost,
                total_amount=priced.total_amount,
            )
            try:
                return self.orders.create_order(new_order), number
            except DuplicateOrderNumber:
                logger.warning("order number collision", extra={"order_number": number, "attempt": attempt})
        raise DuplicateOrderNumber(number)

    def find_one(self, order_id: uuid.UUID) -> Order:
        """Return the hydrated order or raise NotFound."""
        order = self.orders.get(order_id)
        if order is None:
            raise NotFound("Order", order_id)
        return order

    def find_all(self) -> List[Order]:
        """Return every hydrated order, newest first."""
        return self.orders.list()
