"""Route tests for video, campaign and quick ad endpoints (services patched)."""

import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest

from djcafe.core.exceptions import ConflictError
from djcafe.features.campaigns.service import CampaignService, QuickAdService, VideoService
from djcafe.features.notifications.schemas import QuickAdPayload


class TestCampaignRoutes:
    @pytest.mark.asyncio
    async def test_active_is_null_when_idle(self, client, fake_db):
        with patch.object(CampaignService, "get_active", AsyncMock(return_value=None)):
            response = await client.get("/campaigns/active")

        assert response.status_code == 200
        assert response.json() is None

    @pytest.mark.asyncio
    async def test_past_schedule_is_422(self, client, fake_db):
        past = (datetime.now(UTC) - timedelta(minutes=1)).isoformat()
        response = await client.post(
            "/campaigns", json={"video_id": str(uuid.uuid4()), "scheduled_at": past}
        )

        assert response.status_code == 422
        assert response.headers["content-type"] == "application/problem+json"

    @pytest.mark.asyncio
    async def test_cancel_conflict(self, client, fake_db):
        with patch.object(
            CampaignService,
            "cancel_campaign",
            AsyncMock(side_effect=ConflictError("Cannot cancel campaign in status 'completed'")),
        ):
            response = await client.post(f"/campaigns/{uuid.uuid4()}/cancel")

        assert response.status_code == 409


class TestVideoRoutes:
    @pytest.mark.asyncio
    async def test_bulk_delete(self, client, fake_db):
        ids = [str(uuid.uuid4()), str(uuid.uuid4())]
        with patch.object(VideoService, "delete_videos", AsyncMock(return_value=2)) as mock_delete:
            response = await client.post("/videos/bulk-delete", json={"ids": ids})

        assert response.status_code == 200
        assert response.json() == {"count": 2}
        assert [str(i) for i in mock_delete.await_args.kwargs["ids"]] == ids

    @pytest.mark.asyncio
    async def test_bulk_delete_needs_ids(self, client, fake_db):
        response = await client.post("/videos/bulk-delete", json={"ids": []})
        assert response.status_code == 422


class TestQuickAdRoutes:
    @pytest.mark.asyncio
    async def test_play_returns_tv_payload(self, client, fake_db):
        ad_id = uuid.uuid4()
        payload = QuickAdPayload(
            id=ad_id, display_text="Espresso", price="150.00", duration_seconds=8
        )
        with patch.object(QuickAdService, "play_quick_ad", AsyncMock(return_value=payload)):
            response = await client.post(f"/quick-ads/{ad_id}/play")

        assert response.status_code == 200
        body = response.json()
        assert body["displayText"] == "Espresso"
        assert body["durationSeconds"] == 8

    @pytest.mark.asyncio
    async def test_play_during_campaign_is_409(self, client, fake_db):
        with patch.object(
            QuickAdService,
            "play_quick_ad",
            AsyncMock(side_effect=ConflictError("A campaign is currently active")),
        ):
            response = await client.post(f"/quick-ads/{uuid.uuid4()}/play")

        assert response.status_code == 409
        assert response.json()["type"] == "/errors/conflict"

    @pytest.mark.asyncio
    async def test_create_without_content_is_422(self, client, fake_db):
        response = await client.post(
            "/quick-ads", json={"name": "Empty", "duration_seconds": 5}
        )
        assert response.status_code == 422
