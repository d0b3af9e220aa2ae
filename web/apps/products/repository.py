"""Repository layer for catalog products.

Implements the product lookup/lock port consumed by the orders domain
and the read queries used by the products API. Every method returns
``Product`` dataclasses so callers are not coupled to Django ORM types.
"""

from typing import List, Optional
import uuid

from django.db.models import F

from .domain import Product
from .models import ProductModel


def to_domain(obj: ProductModel) -> Product:
    """Map a ``ProductModel`` row to the ``Product`` dataclass."""
    return Product(
        id=obj.id,
        name=obj.name,
        price=obj.price,
        stock=obj.stock,
        sku=obj.sku,
        description=obj.description,
        category=obj.category,
        is_active=obj.is_active,
        created_at=obj.created_at,
        updated_at=obj.updated_at,
    )


class ProductRepository:
    """Django ORM implementation of ``ProductCatalogPort``.

    ``get_active`` and ``decrement_stock`` are meant to be called inside
    an open ``transaction.atomic()`` block: the lookup takes a row lock
    (``SELECT ... FOR UPDATE``) that is held until the surrounding
    transaction commits or rolls back.
    """

    def get_active(self, product_id: uuid.UUID) -> Optional[Product]:
        """Fetch and lock an active product.

        Args:
            product_id: Identifier of the product to look up.

        Returns:
            The ``Product`` if a row with ``is_active=True`` matches,
            otherwise None.
        """
        try:
            obj = ProductModel.objects.select_for_update().get(pk=product_id, is_active=True)
        except ProductModel.DoesNotExist:
            return None
        return to_domain(obj)

    def decrement_stock(self, product_id: uuid.UUID, quantity: int) -> bool:
        """Atomically subtract ``quantity`` from a product's stock.

        The update only matches when enough stock is left, so two
        concurrent writers can never drive stock below zero.

        Args:
            product_id: Product to update.
            quantity: Units to remove (positive).

        Returns:
            True if the row was updated, False when stock was insufficient
            (or the product vanished).
        """
        updated = (
            ProductModel.objects
            .filter(pk=product_id, stock__gte=quantity)
            .update(stock=F("stock") - quantity)
        )
        return updated == 1

    def find_active(self, product_id: uuid.UUID) -> Optional[Product]:
        """Non-locking lookup used by the read API."""
        obj = ProductModel.objects.filter(pk=product_id, is_active=True).first()
        return to_domain(obj) if obj else None

    def list_active(self) -> List[Product]:
        """Return every active product, newest first."""
        qs = ProductModel.objects.filter(is_active=True).order_by("-created_at")
        return [to_domain(o) for o in qs]
