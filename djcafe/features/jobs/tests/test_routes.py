"""Route tests for job endpoints (service layer patched)."""

from unittest.mock import AsyncMock, patch

import pytest

from djcafe.core.exceptions import BadRequestError, NotFoundError
from djcafe.features.jobs.schemas import JobListResponse
from djcafe.features.jobs.service import JobService


class TestJobRoutes:
    @pytest.mark.asyncio
    async def test_create_returns_202(self, client, fake_db, sample_job_response):
        with patch.object(
            JobService, "create_job", AsyncMock(return_value=sample_job_response)
        ) as mock_create:
            response = await client.post("/jobs", json={"job_type": "update_prices"})

        assert response.status_code == 202
        assert response.json()["result"]["updated_count"] == 12
        assert mock_create.await_args.kwargs["job_create"].params == {}

    @pytest.mark.asyncio
    async def test_unknown_job_type_is_422(self, client, fake_db):
        response = await client.post("/jobs", json={"job_type": "train"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_list_passes_filters(self, client, fake_db, sample_job_response):
        listing = JobListResponse(jobs=[sample_job_response], total=1, page=1, page_size=20)
        with patch.object(JobService, "list_jobs", AsyncMock(return_value=listing)) as mock_list:
            response = await client.get("/jobs?job_type=update_prices&status=completed")

        assert response.status_code == 200
        assert response.json()["total"] == 1
        kwargs = mock_list.await_args.kwargs
        assert kwargs["job_type"] == "update_prices"
        assert kwargs["status"] == "completed"

    @pytest.mark.asyncio
    async def test_get_missing_is_404(self, client, fake_db):
        with patch.object(
            JobService, "get_job", AsyncMock(side_effect=NotFoundError("Job not found: x"))
        ):
            response = await client.get("/jobs/x")

        assert response.status_code == 404
        assert response.json()["type"] == "/errors/not-found"

    @pytest.mark.asyncio
    async def test_cancel_running_is_400(self, client, fake_db):
        with patch.object(
            JobService,
            "cancel_job",
            AsyncMock(side_effect=BadRequestError("Cannot cancel job in status 'running'")),
        ):
            response = await client.delete("/jobs/abc")

        assert response.status_code == 400
