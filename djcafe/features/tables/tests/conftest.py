"""Test fixtures for tables module."""

import uuid
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from djcafe.features.catalog.models import Product
from djcafe.features.tables.models import DiningTable, PaymentStatus, TableOrder, TableStatus
from djcafe.features.tables.service import TableService

CREATED = datetime(2026, 10, 19, 20, 30, tzinfo=UTC)


@pytest.fixture
def db():
    """Mocked AsyncSession with synchronous add()."""
    session = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def adjust_sales():
    """Record sales count adjustments instead of issuing UPDATEs."""
    with patch.object(TableService, "_adjust_sales", new_callable=AsyncMock) as mocked:
        yield mocked


@pytest.fixture
def table() -> DiningTable:
    return DiningTable(
        id=uuid.uuid4(),
        number=7,
        status=TableStatus.ACTIVE.value,
        created_at=CREATED,
        updated_at=CREATED,
    )


@pytest.fixture
def product() -> Product:
    return Product(id=uuid.uuid4(), name="Espresso", current_price=Decimal("180"))


@pytest.fixture
def make_order(table):
    """Factory for persisted-looking order lines."""

    def make(product_id: uuid.UUID, quantity: int = 1, price: str = "180", **overrides):
        fields = {
            "id": uuid.uuid4(),
            "table_id": table.id,
            "product_id": product_id,
            "quantity": quantity,
            "ordered_price": Decimal(price),
            "payment_status": PaymentStatus.UNPAID.value,
            "created_at": CREATED,
        }
        fields.update(overrides)
        return TableOrder(**fields)

    return make


@pytest.fixture
def scalar_result():
    """Mocked Result whose scalar_one_or_none() returns ``value``."""

    def make(value):
        result = MagicMock()
        result.scalar_one_or_none.return_value = value
        return result

    return make
