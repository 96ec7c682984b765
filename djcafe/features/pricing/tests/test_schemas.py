"""Tests for pricing schemas."""

import uuid
from decimal import Decimal

import pytest
from pydantic import ValidationError

from djcafe.features.catalog.models import PricingMode
from djcafe.features.pricing.schemas import (
    BulkPriceUpdateRequest,
    PriceUpdate,
    PriceUpdateInterval,
    PricingConfigUpdate,
)


def price_row(**overrides):
    row = {
        "id": str(uuid.uuid4()),
        "base_price": "700",
        "min_price": "500",
        "max_price": "900",
        "total_sales_count": 12,
    }
    row.update(overrides)
    return row


class TestPriceUpdate:
    def test_valid_row(self):
        assert PriceUpdate.model_validate(price_row()).total_sales_count == 12

    def test_min_equal_to_max_is_rejected(self):
        with pytest.raises(ValidationError, match="Minimum price must be lower"):
            PriceUpdate.model_validate(price_row(min_price="900"))

    def test_prices_rounded_to_dinars(self):
        row = PriceUpdate.model_validate(price_row(base_price="700.5", min_price="499.4"))
        assert (row.base_price, row.min_price) == (Decimal("701"), Decimal("499"))

    def test_bounds_checked_after_rounding(self):
        with pytest.raises(ValidationError, match="Minimum price must be lower"):
            PriceUpdate.model_validate(price_row(min_price="10.2", max_price="10.4", base_price="10"))

    def test_price_rounding_to_zero_rejected(self):
        with pytest.raises(ValidationError, match="at least 1 dinar"):
            PriceUpdate.model_validate(price_row(base_price="0.4"))

    def test_negative_sales_rejected(self):
        with pytest.raises(ValidationError):
            PriceUpdate.model_validate(price_row(total_sales_count=-1))

    def test_bulk_request_needs_rows(self):
        with pytest.raises(ValidationError):
            BulkPriceUpdateRequest(updates=[])


class TestPricingConfigUpdate:
    def config(self, **overrides):
        body = {
            "pricing_mode": "full",
            "price_increase_percent": "2",
            "price_increase_random_percent": "1",
            "price_decrease_percent": "1",
            "price_decrease_random_percent": "0.5",
        }
        body.update(overrides)
        return body

    def test_valid_config(self):
        config = PricingConfigUpdate.model_validate(self.config(pricing_mode="up"))
        assert config.pricing_mode == PricingMode.UP

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("price_increase_percent", "0.05"),
            ("price_increase_percent", "10.5"),
            ("price_decrease_percent", "0"),
            ("price_increase_random_percent", "5.1"),
            ("price_decrease_random_percent", "-1"),
        ],
    )
    def test_out_of_range_percent(self, field, value):
        with pytest.raises(ValidationError):
            PricingConfigUpdate.model_validate(self.config(**{field: value}))

    def test_unknown_mode(self):
        with pytest.raises(ValidationError):
            PricingConfigUpdate.model_validate(self.config(pricing_mode="random"))


class TestPriceUpdateInterval:
    @pytest.mark.parametrize("minutes", [1, 15, 60])
    def test_accepts_one_to_sixty(self, minutes):
        assert PriceUpdateInterval(minutes=minutes).minutes == minutes

    @pytest.mark.parametrize("minutes", [0, 61])
    def test_rejects_outside_range(self, minutes):
        with pytest.raises(ValidationError):
            PriceUpdateInterval(minutes=minutes)
