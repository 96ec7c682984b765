"""Test fixtures for pricing module."""

import uuid
from datetime import UTC, datetime
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from djcafe.features.catalog.models import PricingMode, Product, ProductStatus, Trend


class FixedRandom:
    """Random source that always returns the same value."""

    def __init__(self, value: float) -> None:
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def fixed_random():
    return FixedRandom


@pytest.fixture
def priced_item():
    """Factory for plain objects carrying the pricing fields."""

    def make(**overrides):
        fields = {
            "current_price": Decimal("1000"),
            "min_price": Decimal("500"),
            "max_price": Decimal("1500"),
            "pricing_mode": PricingMode.FULL.value,
            "price_increase_percent": Decimal("2"),
            "price_increase_random_percent": Decimal("1"),
            "price_decrease_percent": Decimal("1"),
            "price_decrease_random_percent": Decimal("0.5"),
            "sales_count": 0,
            "manual_sales_adjustment": 0,
            "sales_count_at_last_update": 0,
        }
        fields.update(overrides)
        return SimpleNamespace(**fields)

    return make


@pytest.fixture
def make_product():
    """Factory for transient Product rows."""

    def make(**overrides):
        fields = {
            "id": uuid.uuid4(),
            "name": "Negroni",
            "category_id": uuid.uuid4(),
            "base_price": Decimal("800"),
            "min_price": Decimal("600"),
            "max_price": Decimal("1000"),
            "current_price": Decimal("800"),
            "previous_price": Decimal("800"),
            "sales_count": 0,
            "sales_count_at_last_update": 0,
            "manual_sales_adjustment": 0,
            "trend": Trend.DOWN.value,
            "status": ProductStatus.ACTIVE.value,
            "pricing_mode": PricingMode.FULL.value,
            "price_increase_percent": Decimal("2"),
            "price_increase_random_percent": Decimal("1"),
            "price_decrease_percent": Decimal("1"),
            "price_decrease_random_percent": Decimal("0.5"),
            "last_price_update": datetime(2026, 10, 19, 20, 0, tzinfo=UTC),
        }
        fields.update(overrides)
        return Product(**fields)

    return make


@pytest.fixture
def db():
    """Mocked AsyncSession with synchronous add()."""
    session = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def scalars_result():
    """Build a mocked Result whose scalars().all() returns rows."""

    def make(rows):
        result = MagicMock()
        result.scalars.return_value.all.return_value = rows
        return result

    return make
