"""Pydantic schemas for product and category endpoints."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from djcafe.features.catalog.models import PricingMode, ProductStatus, Trend
from djcafe.shared.utils import round_positive_price

# =============================================================================
# Categories
# =============================================================================


class CategoryResponse(BaseModel):
    """Menu category."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    slug: str


# =============================================================================
# Product Create / Update
# =============================================================================


class ProductWrite(BaseModel):
    """Fields shared by the create and edit product forms.

    Prices are rounded to whole dinars as they are read, so the bounds check
    sees the values that will be stored.
    """

    name: str = Field(..., min_length=1, max_length=200, description="Product name (required)")
    category_id: uuid.UUID = Field(..., description="Category the product belongs to")
    base_price: Decimal = Field(..., gt=0, description="Reference price in RSD")
    min_price: Decimal = Field(..., gt=0, description="Lowest price dynamic pricing may reach")
    max_price: Decimal = Field(..., gt=0, description="Highest price dynamic pricing may reach")
    status: ProductStatus = Field(ProductStatus.ACTIVE, description="'active' or 'draft'")

    @field_validator("base_price", "min_price", "max_price")
    @classmethod
    def round_to_dinars(cls, v: Decimal) -> Decimal:
        return round_positive_price(v)

    @model_validator(mode="after")
    def validate_price_bounds(self) -> "ProductWrite":
        """Minimum price must be strictly lower than maximum price."""
        if self.min_price >= self.max_price:
            raise ValueError("Minimum price must be lower than maximum price")
        return self


class ProductCreate(ProductWrite):
    """Request body for POST /products."""


class ProductUpdate(ProductWrite):
    """Request body for PUT /products/{product_id}."""


# =============================================================================
# Product Responses
# =============================================================================


class ProductResponse(BaseModel):
    """Full product record."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    category_id: uuid.UUID
    base_price: Decimal
    min_price: Decimal
    max_price: Decimal
    current_price: Decimal
    previous_price: Decimal
    sales_count: int
    sales_count_at_last_update: int
    manual_sales_adjustment: int
    trend: Trend
    status: ProductStatus
    pricing_mode: PricingMode
    price_increase_percent: Decimal
    price_increase_random_percent: Decimal
    price_decrease_percent: Decimal
    price_decrease_random_percent: Decimal
    last_price_update: datetime
    created_at: datetime
    updated_at: datetime


class ProductListItem(BaseModel):
    """Row in the admin products table."""

    id: uuid.UUID
    name: str
    current_price: Decimal
    status: ProductStatus
    category_id: uuid.UUID
    category_name: str | None = None


class ProductListResponse(BaseModel):
    """Paginated product listing."""

    products: list[ProductListItem]
    total: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)
    current_page: int = Field(..., ge=1)


class ActiveProductOption(BaseModel):
    """Active product offered in the add-to-table picker."""

    id: uuid.UUID
    name: str
    category_name: str | None = None
    current_price: Decimal
