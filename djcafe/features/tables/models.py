"""Dining tables and the order lines booked against them."""

from __future__ import annotations

import uuid
from decimal import Decimal
from enum import Enum

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from djcafe.core.database import Base
from djcafe.features.catalog.models import Product
from djcafe.shared.models import TimestampMixin, UUIDPrimaryKeyMixin


class TableStatus(str, Enum):
    """Whether a table is in service."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class PaymentStatus(str, Enum):
    """Payment state of one order line."""

    PAID = "paid"
    UNPAID = "unpaid"


class DiningTable(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Café table identified by its painted number."""

    __tablename__ = "tables"

    number: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    status: Mapped[str] = mapped_column(
        String(10), nullable=False, default=TableStatus.ACTIVE.value
    )

    orders: Mapped[list[TableOrder]] = relationship(
        back_populates="table", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint("status IN ('active', 'inactive')", name="ck_tables_valid_status"),
    )


class TableOrder(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Order line: quantity of one product at the price it was ordered at.

    Lines for the same product merge only while the product price is
    unchanged; a price move starts a new line.
    """

    __tablename__ = "table_orders"

    table_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("tables.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    ordered_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    payment_status: Mapped[str] = mapped_column(
        String(10), nullable=False, default=PaymentStatus.UNPAID.value
    )

    table: Mapped[DiningTable] = relationship(back_populates="orders")
    product: Mapped[Product] = relationship()

    __table_args__ = (
        Index("ix_table_orders_table_created", "table_id", "created_at"),
        CheckConstraint(
            "payment_status IN ('paid', 'unpaid')",
            name="ck_table_orders_valid_payment_status",
        ),
    )
