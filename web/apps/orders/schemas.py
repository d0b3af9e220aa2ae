"""Pydantic schemas for orders.

This module exposes the request/validation schemas used by the orders
API and the read schemas used to render hydrated orders. Field names
are camelCase on the wire (``customerEmail``, ``orderItems``) and
snake_case in Python.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from apps.products.schemas import ProductReadDTO

from .domain import (
    CreateOrderRequest,
    OrderLine,
    OrderStatus,
    PaymentDetails,
    PaymentMethod,
    PaymentStatus,
    ShippingDetails,
    ShippingMethod,
    ShippingStatus,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ---- Input ----
class OrderItemIn(CamelModel):
    """Input schema for a single order line.

    Attributes:
        product_id: UUID of the product to order.
        quantity: Positive integer indicating units requested.
    """

    product_id: uuid.UUID
    quantity: int = Field(ge=1)


class ShippingIn(CamelModel):
    method: ShippingMethod
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    address_line1: str = Field(min_length=1, max_length=255)
    address_line2: Optional[str] = Field(default=None, max_length=255)
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(min_length=1, max_length=100)
    postal_code: str = Field(min_length=1, max_length=20)
    country: str = Field(min_length=1, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[EmailStr] = None


class PaymentIn(CamelModel):
    """Input schema for the payment block.

    Only masked card data is accepted: the last four digits, the brand
    and the expiry date.
    """

    method: PaymentMethod
    last_four_digits: Optional[str] = Field(default=None, pattern=r"^\d{4}$")
    card_brand: Optional[str] = Field(default=None, max_length=50)
    expiry_month: Optional[str] = Field(default=None, pattern=r"^(0[1-9]|1[0-2])$")
    expiry_year: Optional[str] = Field(default=None, pattern=r"^\d{2}(\d{2})?$")
    billing_first_name: Optional[str] = Field(default=None, max_length=100)
    billing_last_name: Optional[str] = Field(default=None, max_length=100)
    billing_address_line1: Optional[str] = Field(default=None, max_length=255)
    billing_address_line2: Optional[str] = Field(default=None, max_length=255)
    billing_city: Optional[str] = Field(default=None, max_length=100)
    billing_state: Optional[str] = Field(default=None, max_length=100)
    billing_postal_code: Optional[str] = Field(default=None, max_length=20)
    billing_country: Optional[str] = Field(default=None, max_length=100)


class CreateOrderDTO(CamelModel):
    """Schema for creating an order.

    ``order_items`` may be missing or empty here; the domain service
    rejects such orders with an ``EMPTY_ORDER`` error so the client gets
    the same answer either way.
    """

    customer_email: Annotated[EmailStr, Field(max_length=100)]
    customer_name: Optional[str] = Field(default=None, max_length=100)
    customer_phone: Optional[str] = Field(default=None, max_length=20)
    order_items: Optional[List[OrderItemIn]] = None
    shipping: ShippingIn
    payment: PaymentIn
    notes: Optional[str] = None

    def to_domain(self) -> CreateOrderRequest:
        """Map the validated payload to the domain request."""
        items = None
        if self.order_items is not None:
            items = [OrderLine(product_id=i.product_id, quantity=i.quantity) for i in self.order_items]
        return CreateOrderRequest(
            customer_email=str(self.customer_email),
            customer_name=self.customer_name,
            customer_phone=self.customer_phone,
            notes=self.notes,
            items=items,
            shipping=ShippingDetails(**self.shipping.model_dump()),
            payment=PaymentDetails(**self.payment.model_dump()),
        )


# ---- Output ----
class OrderItemReadDTO(CamelModel):
    id: uuid.UUID
    order_id: uuid.UUID
    product_id: Optional[uuid.UUID] = None
    product_name: str
    product_sku: Optional[str] = None
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    product: Optional[ProductReadDTO] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ShippingReadDTO(CamelModel):
    id: uuid.UUID
    order_id: uuid.UUID
    method: ShippingMethod
    status: ShippingStatus
    first_name: str
    last_name: str
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: str
    postal_code: str
    country: str
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


class PaymentReadDTO(CamelModel):
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
    refunded_amount: Decimal = Decimal("0.00")
    refunded_at: Optional[datetime] = None
    refund_reason: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrderReadDTO(CamelModel):
    """Read model of a fully hydrated order."""

    id: uuid.UUID
    order_number: str
    customer_email: str
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    status: OrderStatus
    subtotal: Decimal
    tax_amount: Decimal
    shipping_cost: Decimal
    total_amount: Decimal
    currency: str
    notes: Optional[str] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    order_items: List[OrderItemReadDTO] = []
    shipping: Optional[ShippingReadDTO] = None
    payment: Optional[PaymentReadDTO] = None

    @classmethod
    def render(cls, order) -> dict:
        """Dump a domain ``Order`` as a JSON-ready camelCase dict."""
        return cls.model_validate(order).model_dump(mode="json", by_alias=True)
