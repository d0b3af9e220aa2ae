"""Service provider helpers for wiring OrderService with ports.

Views obtain their ``OrderService`` from ``get_order_service`` so tests can
monkeypatch this single function to inject a service built on other
ports (for example ``adapters.InMemoryStore``).
"""

from django.conf import settings

from apps.products.repository import ProductRepository

from .domain import OrderService
from .numbering import OrderNumberGenerator
from .repository import OrderRepository


def get_order_service() -> OrderService:
    """Return an OrderService backed by the Django ORM repositories.

    ``settings.ORDER_NUMBER_MAX_ATTEMPTS`` bounds how many order numbers
    are tried when the generated one collides.
    """
    return OrderService(
        products=ProductRepository(),
        orders=OrderRepository(),
        numbers=OrderNumberGenerator(),
        max_number_attempts=getattr(settings, "ORDER_NUMBER_MAX_ATTEMPTS", 5),
    )
