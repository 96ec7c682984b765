"""Dynamic pricing: the price algorithm, the pricing admin page and settings."""

from djcafe.features.pricing.calculator import calculate_price, sales_window
from djcafe.features.pricing.models import AppSetting
from djcafe.features.pricing.routes import router
from djcafe.features.pricing.service import PricingService

__all__ = [
    "AppSetting",
    "PricingService",
    "calculate_price",
    "router",
    "sales_window",
]
