"""Test fixtures for catalog module."""

import uuid
from datetime import UTC, datetime
from decimal import Decimal

import pytest

from djcafe.features.catalog.models import PricingMode, Product, ProductStatus, Trend


def fill_server_defaults(product: Product) -> None:
    """Stand-in for db.refresh: populate what the database would generate."""
    now = datetime(2026, 10, 19, 21, 0, tzinfo=UTC)
    product.id = product.id or uuid.uuid4()
    product.created_at = now
    product.updated_at = now
    product.last_price_update = product.last_price_update or now
    product.sales_count_at_last_update = product.sales_count_at_last_update or 0
    product.manual_sales_adjustment = product.manual_sales_adjustment or 0
    product.pricing_mode = product.pricing_mode or PricingMode.FULL.value
    product.price_increase_percent = product.price_increase_percent or Decimal("2.0")
    product.price_increase_random_percent = product.price_increase_random_percent or Decimal("1.0")
    product.price_decrease_percent = product.price_decrease_percent or Decimal("1.0")
    product.price_decrease_random_percent = product.price_decrease_random_percent or Decimal("0.5")


@pytest.fixture
def category_id() -> uuid.UUID:
    return uuid.UUID("5b3f0a2e-7c1d-4e8f-9a6b-2c4d6e8f0a1b")


@pytest.fixture
def sample_product(category_id: uuid.UUID) -> Product:
    """Active Mojito as stored in the database."""
    product = Product(
        id=uuid.uuid4(),
        name="Mojito",
        category_id=category_id,
        base_price=Decimal("650"),
        min_price=Decimal("500"),
        max_price=Decimal("900"),
        current_price=Decimal("650"),
        previous_price=Decimal("650"),
        sales_count=4,
        trend=Trend.DOWN.value,
        status=ProductStatus.ACTIVE.value,
    )
    fill_server_defaults(product)
    return product


@pytest.fixture
def product_payload(category_id: uuid.UUID) -> dict:
    """Valid create/edit form body."""
    return {
        "name": "Caipirinha",
        "category_id": str(category_id),
        "base_price": "700.4",
        "min_price": "550.5",
        "max_price": "950",
    }


@pytest.fixture
def server_defaults():
    """Callable standing in for ``db.refresh`` on new products."""
    return fill_server_defaults
