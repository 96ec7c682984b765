"""Menu administration: categories and products."""

from djcafe.features.catalog.models import (
    Category,
    PriceHistory,
    PricingMode,
    Product,
    ProductStatus,
    Trend,
)
from djcafe.features.catalog.routes import router
from djcafe.features.catalog.service import CatalogService

__all__ = [
    "CatalogService",
    "Category",
    "PriceHistory",
    "PricingMode",
    "Product",
    "ProductStatus",
    "Trend",
    "router",
]
