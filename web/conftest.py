"""Shared fixtures for the web test-suite."""
import uuid
from decimal import Decimal

import pytest


@pytest.fixture(autouse=True)
def reset_throttle_cache():
    # Throttle history lives in the process-wide cache
    from django.core.cache import cache
    cache.clear()


@pytest.fixture
def make_product(db):
    """Factory creating persisted catalog products."""
    from apps.products.models import ProductModel

    def _make(**overrides):
        fields = {
            "name": "Organic Cotton T-Shirt",
            "description": "Comfortable 100% organic cotton t-shirt.",
            "price": Decimal("29.99"),
            "stock": 100,
            "category": "Clothing",
            "sku": "OCT-001",
            "is_active": True,
        }
        fields.update(overrides)
        return ProductModel.objects.create(**fields)

    return _make


@pytest.fixture
def order_payload():
    """Build a valid camelCase create-order payload."""

    def _payload(*lines, **overrides):
        body = {
            "customerEmail": "a@b.com",
            "customerName": "Ada Lovelace",
            "orderItems": [
                {"productId": str(product_id), "quantity": quantity} for product_id, quantity in lines
            ],
            "shipping": {
                "method": "standard",
                "firstName": "Ada",
                "lastName": "Lovelace",
                "addressLine1": "12 St James's Square",
                "city": "London",
                "state": "London",
                "postalCode": "SW1Y 4JH",
                "country": "GB",
            },
            "payment": {
                "method": "credit_card",
                "lastFourDigits": "4242",
                "cardBrand": "visa",
                "expiryMonth": "12",
                "expiryYear": "2030",
            },
        }
        body.update(overrides)
        return body

    return _payload


@pytest.fixture
def unknown_id():
    return uuid.uuid4()
