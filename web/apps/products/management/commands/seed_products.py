"""Populate the catalog with demo products.

Usage::

    python manage.py seed_products

Existing products are deleted first so repeated runs leave exactly the
demo catalog.
"""

import logging
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.products.models import ProductModel

logger = logging.getLogger("products")

DEMO_PRODUCTS = [
    ("Wireless Bluetooth Headphones", "High-quality wireless headphones with noise cancellation and 30-hour battery life.", "199.99", 50, "Electronics", "WBH-001"),
    ("Organic Cotton T-Shirt", "Comfortable 100% organic cotton t-shirt, available in multiple colors.", "29.99", 100, "Clothing", "OCT-001"),
    ("Stainless Steel Water Bottle", "Insulated stainless steel water bottle that keeps drinks cold for 24 hours.", "24.99", 75, "Accessories", "SSB-001"),
    ("Smart Fitness Tracker", "Advanced fitness tracker with heart rate monitoring and GPS tracking.", "149.99", 30, "Electronics", "SFT-001"),
    ("Leather Laptop Bag", "Premium leather laptop bag with multiple compartments and padded protection.", "89.99", 25, "Accessories", "LLB-001"),
    ("Wireless Charging Pad", "Fast wireless charging pad compatible with all Qi-enabled devices.", "39.99", 60, "Electronics", "WCP-001"),
    ("Yoga Mat Premium", "Non-slip yoga mat made from eco-friendly materials with carrying strap.", "49.99", 40, "Sports", "YMP-001"),
    ("Coffee Maker Deluxe", "Programmable coffee maker with built-in grinder and thermal carafe.", "179.99", 15, "Home & Kitchen", "CMD-001"),
    ("Bluetooth Speaker Portable", "Waterproof portable Bluetooth speaker with 360-degree sound.", "79.99", 45, "Electronics", "BSP-001"),
    ("Running Shoes Athletic", "Lightweight running shoes with advanced cushioning and breathable mesh.", "129.99", 80, "Sports", "RSA-001"),
    ("LED Desk Lamp", "Adjustable LED desk lamp with multiple brightness levels and USB charging port.", "34.99", 35, "Home & Kitchen", "LDL-001"),
    ("Phone Case Protective", "Shock-absorbing phone case with raised edges for screen protection.", "19.99", 120, "Accessories", "PCP-001"),
    ("Protein Powder Vanilla", "Whey protein powder with natural vanilla flavor, 2lb container.", "44.99", 20, "Sports", "PPV-001"),
    ("Mechanical Keyboard Gaming", "RGB backlit mechanical gaming keyboard with customizable keys.", "119.99", 18, "Electronics", "MKG-001"),
    ("Travel Backpack 40L", "Durable travel backpack with laptop compartment and multiple pockets.", "69.99", 32, "Accessories", "TB40-001"),
]


class Command(BaseCommand):
    help = "Insert the demo product catalog."

    @transaction.atomic
    def handle(self, *args, **options):
        existing = ProductModel.objects.count()
        if existing:
            ProductModel.objects.all().delete()
            logger.info("cleared products", extra={"count": existing})

        created = ProductModel.objects.bulk_create(
            [
                ProductModel(
                    name=name,
                    description=description,
                    price=Decimal(price),
                    stock=stock,
                    category=category,
                    sku=sku,
                    is_active=True,
                )
                for name, description, price, stock, category, sku in DEMO_PRODUCTS
            ]
        )
        logger.info("seeded products", extra={"count": len(created)})
        self.stdout.write(self.style.SUCCESS(f"Seeded {len(created)} products"))
