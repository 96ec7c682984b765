"""Route tests for pricing endpoints (service layer patched)."""

from unittest.mock import AsyncMock, patch

import pytest

from djcafe.features.pricing.schemas import PriceUpdateResult
from djcafe.features.pricing.service import PricingService


class TestPricingRoutes:
    @pytest.mark.asyncio
    async def test_update_now_is_manual(self, client, fake_db):
        result = PriceUpdateResult(updated_count=4, unchanged_count=1, manual=True)
        with patch.object(
            PricingService, "update_all_prices", AsyncMock(return_value=result)
        ) as mock_update:
            response = await client.post("/pricing/update-now")

        assert response.status_code == 200
        assert response.json() == {"updated_count": 4, "unchanged_count": 1, "manual": True}
        assert mock_update.await_args.kwargs == {"manual": True}

    @pytest.mark.asyncio
    async def test_interval_out_of_range(self, client, fake_db):
        response = await client.put("/pricing/interval", json={"minutes": 61})

        assert response.status_code == 422
        assert response.json()["errors"][0]["field"] == "minutes"

    @pytest.mark.asyncio
    async def test_interval_roundtrip(self, client, fake_db):
        with patch.object(
            PricingService, "set_price_update_interval", AsyncMock(return_value=5)
        ):
            response = await client.put("/pricing/interval", json={"minutes": 5})

        assert response.json() == {"minutes": 5}

    @pytest.mark.asyncio
    async def test_config_rejects_excessive_increase(self, client, fake_db):
        response = await client.put(
            "/pricing/config",
            json={
                "pricing_mode": "full",
                "price_increase_percent": 25,
                "price_increase_random_percent": 1,
                "price_decrease_percent": 1,
                "price_decrease_random_percent": 1,
            },
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_sync_sales_returns_count(self, client, fake_db):
        with patch.object(PricingService, "sync_sales_count", AsyncMock(return_value=12)):
            response = await client.post("/pricing/sync-sales")

        assert response.json() == {"count": 12}
