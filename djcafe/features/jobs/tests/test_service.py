"""Unit tests for JobService with a mocked session."""

from unittest.mock import MagicMock

import pytest

from djcafe.core.exceptions import BadRequestError, NotFoundError
from djcafe.features.campaigns.schemas import CampaignTickResult
from djcafe.features.jobs.models import Job, JobStatus
from djcafe.features.jobs.service import JobService


def one(db, value):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    db.execute.return_value = result


class TestCreateJob:
    @pytest.mark.asyncio
    async def test_update_prices_runs_manually(
        self, db, pricing, campaigns, sample_update_prices_job_create
    ):
        response = await JobService(pricing=pricing, campaigns=campaigns).create_job(
            db, sample_update_prices_job_create
        )

        assert response.status == JobStatus.COMPLETED
        assert response.result == {"updated_count": 12, "unchanged_count": 3, "manual": True}
        assert response.started_at is not None
        assert response.completed_at is not None
        assert len(response.job_id) == 32
        pricing.update_all_prices.assert_awaited_once_with(db, manual=True)
        campaigns.process_campaigns.assert_not_awaited()
        # pending, running, finished
        assert db.commit.await_count == 3

    @pytest.mark.asyncio
    async def test_process_campaigns(
        self, db, pricing, campaigns, sample_process_campaigns_job_create
    ):
        tick = CampaignTickResult()
        campaigns.process_campaigns.return_value = tick

        response = await JobService(pricing=pricing, campaigns=campaigns).create_job(
            db, sample_process_campaigns_job_create
        )

        assert response.status == JobStatus.COMPLETED
        assert response.params == {"source": "admin"}
        assert response.result == {"started": [], "playing": [], "completed": []}
        campaigns.process_campaigns.assert_awaited_once_with(db)

    @pytest.mark.asyncio
    async def test_failure_recorded_after_rollback(
        self, db, pricing, campaigns, sample_update_prices_job_create
    ):
        pricing.update_all_prices.side_effect = RuntimeError("deadlock detected")

        response = await JobService(pricing=pricing, campaigns=campaigns).create_job(
            db, sample_update_prices_job_create
        )

        assert response.status == JobStatus.FAILED
        assert response.error_message == "deadlock detected"
        assert response.error_type == "RuntimeError"
        assert response.result is None
        db.rollback.assert_awaited_once()
        calls = [name for name, _args, _kwargs in db.mock_calls]
        assert calls.index("refresh", calls.index("rollback")) > calls.index("rollback")
        assert db.commit.await_count == 3

    def test_default_campaign_service_shares_pricing(self, pricing):
        service = JobService(pricing=pricing)
        assert service.campaigns.pricing is pricing


class TestGetJob:
    @pytest.mark.asyncio
    async def test_found(self, db, make_job):
        job = make_job(status=JobStatus.COMPLETED.value, result={"updated_count": 1})
        one(db, job)

        response = await JobService().get_job(db, job.job_id)

        assert response.job_id == job.job_id
        assert response.status == JobStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_missing(self, db):
        one(db, None)
        with pytest.raises(NotFoundError):
            await JobService().get_job(db, "0" * 32)


class TestCancelJob:
    @pytest.mark.asyncio
    async def test_cancel_pending(self, db, make_job):
        job = make_job()
        one(db, job)

        response = await JobService().cancel_job(db, job.job_id)

        assert response.status == JobStatus.CANCELLED
        assert response.completed_at is not None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["running", "completed", "failed", "cancelled"])
    async def test_only_pending_can_be_cancelled(self, db, make_job, status):
        job: Job = make_job(status=status)
        one(db, job)

        with pytest.raises(BadRequestError, match="Cannot cancel job"):
            await JobService().cancel_job(db, job.job_id)
        db.commit.assert_not_awaited()
