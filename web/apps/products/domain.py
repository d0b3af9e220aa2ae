"""Domain representation of catalog products.

The orders domain reads products through a port and never touches ORM
instances directly, so the catalog hands out this frozen dataclass.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Product:
    """A sellable catalog entry.

    Attributes:
        id: Persistent identifier of the product.
        name: Display name, copied into order lines at order time.
        price: Unit price with two fraction digits.
        stock: Units available. Never negative.
        sku: Optional stock-keeping unit, copied into order lines.
        description: Optional long description.
        category: Optional free-form category name.
        is_active: Inactive products cannot be ordered or listed.
    """

    id: uuid.UUID
    name: str
    price: Decimal
    stock: int
    sku: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
