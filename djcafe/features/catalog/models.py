"""Menu ORM models: categories, products and their price history.

Prices are stored in RSD as Numeric(10, 2). The dynamic pricing job rewrites
current_price/previous_price/trend; every change is also appended to
price_history.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from djcafe.core.database import Base
from djcafe.shared.models import TimestampMixin, UUIDPrimaryKeyMixin


class ProductStatus(str, Enum):
    """Whether a product is on the menu (and on the TV board)."""

    ACTIVE = "active"
    DRAFT = "draft"


class Trend(str, Enum):
    """Direction of the last price change, shown as an arrow on the TV."""

    UP = "up"
    DOWN = "down"


class PricingMode(str, Enum):
    """Which directions the dynamic pricing job may move a price.

    - OFF: never change
    - UP: only increase after sales
    - DOWN: only decrease when idle
    - FULL: both
    """

    OFF = "off"
    UP = "up"
    DOWN = "down"
    FULL = "full"


class Category(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Menu category (e.g. Cocktails, Shots)."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(Text, unique=True, nullable=False)

    products: Mapped[list[Product]] = relationship(
        back_populates="category", cascade="all, delete-orphan", passive_deletes=True
    )


class Product(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Drink with dynamic pricing.

    Attributes:
        base_price: Reference price set by the admin.
        min_price: Lower bound for dynamic pricing.
        max_price: Upper bound for dynamic pricing.
        current_price: Price charged right now.
        previous_price: Price before the last change.
        sales_count: Units sold through table orders.
        sales_count_at_last_update: sales_count snapshot taken at the last price change.
        manual_sales_adjustment: Admin correction added on top of sales_count.
        trend: Direction of the last price change.
        pricing_mode: See PricingMode.
        last_price_update: When the price last changed (or the window was reset).
    """

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    category_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True
    )

    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    min_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    max_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    current_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    previous_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    sales_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sales_count_at_last_update: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    manual_sales_adjustment: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    trend: Mapped[str] = mapped_column(String(4), nullable=False, default=Trend.DOWN.value)
    status: Mapped[str] = mapped_column(
        String(10), nullable=False, default=ProductStatus.ACTIVE.value, index=True
    )

    pricing_mode: Mapped[str] = mapped_column(
        String(4), nullable=False, default=PricingMode.FULL.value
    )
    price_increase_percent: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal("2.00")
    )
    price_increase_random_percent: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal("1.00")
    )
    price_decrease_percent: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal("1.00")
    )
    price_decrease_random_percent: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal("0.00")
    )
    last_price_update: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    category: Mapped[Category] = relationship(back_populates="products")
    price_history: Mapped[list[PriceHistory]] = relationship(
        back_populates="product", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint("status IN ('active', 'draft')", name="ck_products_valid_status"),
        CheckConstraint("trend IN ('up', 'down')", name="ck_products_valid_trend"),
        CheckConstraint(
            "pricing_mode IN ('off', 'up', 'down', 'full')",
            name="ck_products_valid_pricing_mode",
        ),
        CheckConstraint("min_price < max_price", name="ck_products_price_bounds"),
    )


class PriceHistory(UUIDPrimaryKeyMixin, Base):
    """One row per price change; feeds the TV ticker and pricing charts."""

    __tablename__ = "price_history"

    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    product: Mapped[Product] = relationship(back_populates="price_history")

    __table_args__ = (Index("ix_price_history_product_timestamp", "product_id", "timestamp"),)
