"""Repository layer for persisting orders.

This module contains the Django ORM implementation of
``OrderRepositoryPort``. It keeps a thin interface so the domain layer is
not coupled to Django ORM details: writes take domain DTOs and reads
return domain dataclasses.
"""

from typing import List, Optional
import uuid

from django.core.exceptions import ObjectDoesNotExist
from django.db import IntegrityError, transaction
from django.db.models import Prefetch

from apps.products.repository import to_domain as product_to_domain

from .domain import (
    NewOrder,
    Order,
    OrderItem,
    OrderStatus,
    Payment,
    PaymentDetails,
    PaymentMethod,
    PaymentStatus,
    PricedLine,
    Shipping,
    ShippingDetails,
    ShippingMethod,
    ShippingStatus,
)
from .errors import DuplicateOrderNumber
from .models import OrderItemModel, OrderModel, PaymentModel, ShippingModel


def _item_to_domain(obj: OrderItemModel) -> OrderItem:
    return OrderItem(
        id=obj.id,
        order_id=obj.order_id,
        product_id=obj.product_id,
        product_name=obj.product_name,
        product_sku=obj.product_sku,
        quantity=obj.quantity,
        unit_price=obj.unit_price,
        total_price=obj.total_price,
        product=product_to_domain(obj.product) if obj.product is not None else None,
        created_at=obj.created_at,
        updated_at=obj.updated_at,
    )


def _shipping_to_domain(obj: ShippingModel) -> Shipping:
    return Shipping(
        id=obj.id,
        order_id=obj.order_id,
        method=ShippingMethod(obj.method),
        status=ShippingStatus(obj.status),
        first_name=obj.first_name,
        last_name=obj.last_name,
        address_line1=obj.address_line1,
        address_line2=obj.address_line2,
        city=obj.city,
        state=obj.state,
        postal_code=obj.postal_code,
        country=obj.country,
        phone=obj.phone,
        email=obj.email,
        carrier=obj.carrier,
        tracking_number=obj.tracking_number,
        estimated_delivery_date=obj.estimated_delivery_date,
        shipped_date=obj.shipped_date,
        delivered_date=obj.delivered_date,
        weight=obj.weight,
        weight_unit=obj.weight_unit,
        notes=obj.notes,
        created_at=obj.created_at,
        updated_at=obj.updated_at,
    )


def _payment_to_domain(obj: PaymentModel) -> Payment:
    return Payment(
        id=obj.id,
        order_id=obj.order_id,
        method=PaymentMethod(obj.method),
        status=PaymentStatus(obj.status),
        amount=obj.amount,
        currency=obj.currency,
        last_four_digits=obj.last_four_digits,
        card_brand=obj.card_brand,
        expiry_month=obj.expiry_month,
        expiry_year=obj.expiry_year,
        billing_first_name=obj.billing_first_name,
        billing_last_name=obj.billing_last_name,
        billing_address_line1=obj.billing_address_line1,
        billing_address_line2=obj.billing_address_line2,
        billing_city=obj.billing_city,
        billing_state=obj.billing_state,
        billing_postal_code=obj.billing_postal_code,
        billing_country=obj.billing_country,
        gateway_transaction_id=obj.gateway_transaction_id,
        gateway_reference=obj.gateway_reference,
        gateway_name=obj.gateway_name,
        processed_at=obj.processed_at,
        failed_at=obj.failed_at,
        failure_reason=obj.failure_reason,
        refunded_amount=obj.refunded_amount,
        refunded_at=obj.refunded_at,
        refund_reason=obj.refund_reason,
        notes=obj.notes,
        created_at=obj.created_at,
        updated_at=obj.updated_at,
    )


def _related_or_none(obj, name):
    try:
        return getattr(obj, name)
    except ObjectDoesNotExist:
        return None


def to_domain(obj: OrderModel) -> Order:
    """Map a hydrated ``OrderModel`` (with related rows loaded) to ``Order``."""
    shipping = _related_or_none(obj, "shipping")
    payment = _related_or_none(obj, "payment")
    return Order(
        id=obj.id,
        order_number=obj.order_number,
        customer_email=obj.customer_email,
        customer_name=obj.customer_name,
        customer_phone=obj.customer_phone,
        status=OrderStatus(obj.status),
        subtotal=obj.subtotal,
        tax_amount=obj.tax_amount,
        shipping_cost=obj.shipping_cost,
        total_amount=obj.total_amount,
        currency=obj.currency,
        notes=obj.notes,
        shipped_at=obj.shipped_at,
        delivered_at=obj.delivered_at,
        created_at=obj.created_at,
        updated_at=obj.updated_at,
        order_items=[_item_to_domain(i) for i in obj.order_items.all()],
        shipping=_shipping_to_domain(shipping) if shipping is not None else None,
        payment=_payment_to_domain(payment) if payment is not None else None,
    )


class OrderRepository:
    """Repository that persists orders and their dependents using Django ORM.

    ``atomic()`` opens the unit of work; the write methods are expected to
    run inside it so they commit or roll back together with the stock
    updates performed through ``ProductRepository``.
    """

    def atomic(self):
        return transaction.atomic()

    def _hydrated(self):
        items = OrderItemModel.objects.select_related("product").order_by("position")
        return OrderModel.objects.select_related("shipping", "payment").prefetch_related(
            Prefetch("order_items", queryset=items)
        )

    def create_order(self, new_order: NewOrder) -> uuid.UUID:
        """Insert the order row.

        The insert runs in a nested savepoint so a unique violation on
        ``order_number`` only rolls back this statement and the caller can
        retry with a fresh number.

        Args:
            new_order: Column values for the order row.

        Returns:
            The new order's UUID.

        Raises:
            DuplicateOrderNumber: If ``order_number`` is already taken.
        """
        try:
            with transaction.atomic():
                obj = OrderModel.objects.create(
                    order_number=new_order.order_number,
                    customer_email=new_order.customer_email,
                    customer_name=new_order.customer_name,
                    customer_phone=new_order.customer_phone,
                    status=new_order.status.value,
                    subtotal=new_order.subtotal,
                    tax_amount=new_order.tax_amount,
                    shipping_cost=new_order.shipping_cost,
                    total_amount=new_order.total_amount,
                    currency=new_order.currency,
                    notes=new_order.notes,
                )
        except IntegrityError as e:
            if OrderModel.objects.filter(order_number=new_order.order_number).exists():
                raise DuplicateOrderNumber(new_order.order_number) from e
            raise
        return obj.id  # <-- UUID

    def add_items(self, order_id: uuid.UUID, items: List[PricedLine]) -> None:
        OrderItemModel.objects.bulk_create(
            [
                OrderItemModel(
                    order_id=order_id,
                    product_id=item.product_id,
                    position=position,
                    product_name=item.product.name,
                    product_sku=item.product.sku,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    total_price=item.total_price,
                )
                for position, item in enumerate(items)
            ]
        )

    def add_shipping(self, order_id: uuid.UUID, shipping: ShippingDetails) -> None:
        ShippingModel.objects.create(
            order_id=order_id,
            method=shipping.method.value,
            status=ShippingModel.Status.PENDING,
            first_name=shipping.first_name,
            last_name=shipping.last_name,
            address_line1=shipping.address_line1,
            address_line2=shipping.address_line2,
            city=shipping.city,
            state=shipping.state,
            postal_code=shipping.postal_code,
            country=shipping.country,
            phone=shipping.phone,
            email=shipping.email,
        )

    def add_payment(self, order_id: uuid.UUID, payment: PaymentDetails, amount, currency: str) -> None:
        PaymentModel.objects.create(
            order_id=order_id,
            method=payment.method.value,
            status=PaymentModel.Status.PENDING,
            amount=amount,
            currency=currency,
            last_four_digits=payment.last_four_digits,
            card_brand=payment.card_brand,
            expiry_month=payment.expiry_month,
            expiry_year=payment.expiry_year,
            billing_first_name=payment.billing_first_name,
            billing_last_name=payment.billing_last_name,
            billing_address_line1=payment.billing_address_line1,
            billing_address_line2=payment.billing_address_line2,
            billing_city=payment.billing_city,
            billing_state=payment.billing_state,
            billing_postal_code=payment.billing_postal_code,
            billing_country=payment.billing_country,
        )

    def get(self, order_id: uuid.UUID) -> Optional[Order]:
        obj = self._hydrated().filter(pk=order_id).first()
        return to_domain(obj) if obj else None

    def list(self) -> List[Order]:
        qs = self._hydrated().order_by("-created_at")
        return [to_domain(o) for o in qs]
