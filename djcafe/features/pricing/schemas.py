"""Pydantic schemas for the pricing admin page and price jobs."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from djcafe.features.catalog.models import PricingMode, ProductStatus, Trend
from djcafe.shared.utils import round_positive_price

# =============================================================================
# Pricing status
# =============================================================================


class PricingStatusItem(BaseModel):
    """One active product on the pricing page."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    category_name: str | None = None
    current_price: Decimal
    previous_price: Decimal
    base_price: Decimal
    min_price: Decimal
    max_price: Decimal
    sales_count: int
    manual_sales_adjustment: int
    trend: Trend
    pricing_mode: PricingMode
    price_increase_percent: Decimal
    price_increase_random_percent: Decimal
    price_decrease_percent: Decimal
    price_decrease_random_percent: Decimal
    last_price_update: datetime
    status: ProductStatus


# =============================================================================
# Bulk price edit
# =============================================================================


class PriceUpdate(BaseModel):
    """Edited row of the pricing table.

    ``total_sales_count`` is what the admin sees (real sales plus the manual
    adjustment); the service stores only the difference.
    """

    id: uuid.UUID
    base_price: Decimal = Field(..., gt=0)
    min_price: Decimal = Field(..., gt=0)
    max_price: Decimal = Field(..., gt=0)
    total_sales_count: int = Field(..., ge=0, description="Real sales plus manual adjustment")

    @field_validator("base_price", "min_price", "max_price")
    @classmethod
    def round_to_dinars(cls, v: Decimal) -> Decimal:
        return round_positive_price(v)

    @model_validator(mode="after")
    def validate_price_bounds(self) -> "PriceUpdate":
        """Minimum price must be strictly lower than maximum price."""
        if self.min_price >= self.max_price:
            raise ValueError("Minimum price must be lower than maximum price")
        return self


class BulkPriceUpdateRequest(BaseModel):
    """Request body for PUT /pricing/products."""

    updates: list[PriceUpdate] = Field(..., min_length=1)


# =============================================================================
# Pricing config
# =============================================================================


class PricingConfigUpdate(BaseModel):
    """Global pricing configuration applied to every active product."""

    pricing_mode: PricingMode
    price_increase_percent: Decimal = Field(..., ge=Decimal("0.1"), le=10)
    price_increase_random_percent: Decimal = Field(..., ge=0, le=5)
    price_decrease_percent: Decimal = Field(..., ge=Decimal("0.1"), le=10)
    price_decrease_random_percent: Decimal = Field(..., ge=0, le=5)


# =============================================================================
# Interval
# =============================================================================


class PriceUpdateInterval(BaseModel):
    """How often the price job runs."""

    minutes: int = Field(..., ge=1, le=60, description="Interval in minutes (1-60)")


# =============================================================================
# Results
# =============================================================================


class PriceUpdateResult(BaseModel):
    """Outcome of one price update run."""

    updated_count: int = Field(..., ge=0)
    unchanged_count: int = Field(..., ge=0)
    manual: bool = False


class PricingCountResponse(BaseModel):
    """Rows touched by a pricing maintenance action."""

    count: int = Field(..., ge=0)


class PriceHistoryPoint(BaseModel):
    """One recorded price."""

    model_config = ConfigDict(from_attributes=True)

    price: Decimal
    timestamp: datetime
