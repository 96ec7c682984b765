"""Route tests for the TV display endpoints."""

from unittest.mock import AsyncMock, patch

import pytest

from djcafe.features.display.schemas import DisplayProductsResponse, DisplayState
from djcafe.features.display.sequencer import OverlayKind
from djcafe.features.display.service import DisplayService


class TestDisplayRoutes:
    @pytest.mark.asyncio
    async def test_products(self, client, fake_db):
        with patch.object(
            DisplayService,
            "get_products",
            AsyncMock(return_value=DisplayProductsResponse(categories=[], total=0)),
        ):
            response = await client.get("/display/products")

        assert response.status_code == 200
        assert response.json() == {"categories": [], "total": 0}

    @pytest.mark.asyncio
    async def test_state(self, client, fake_db):
        with patch.object(
            DisplayService,
            "get_state",
            AsyncMock(return_value=DisplayState(overlay=OverlayKind.IDLE)),
        ):
            response = await client.get("/display/state")

        assert response.status_code == 200
        assert response.json()["overlay"] == "idle"
        assert response.json()["remaining_seconds"] == 0
