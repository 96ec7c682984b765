"""Test fixtures for jobs module."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from djcafe.features.campaigns.schemas import CampaignTickResult
from djcafe.features.jobs.models import Job, JobStatus, JobType
from djcafe.features.jobs.schemas import (
    JobCreate,
    JobResponse,
)
from djcafe.features.pricing.schemas import PriceUpdateResult

NOW = datetime(2026, 10, 19, 22, 0, tzinfo=UTC)


@pytest.fixture
def sample_update_prices_job_create() -> JobCreate:
    """Create sample 'change prices now' job request."""
    return JobCreate(job_type=JobType.UPDATE_PRICES)


@pytest.fixture
def sample_process_campaigns_job_create() -> JobCreate:
    """Create sample campaign tick job request."""
    return JobCreate(job_type=JobType.PROCESS_CAMPAIGNS, params={"source": "admin"})


@pytest.fixture
def sample_job_response() -> JobResponse:
    """Create sample completed job response."""
    return JobResponse(
        job_id="abc123def4567890123456789012abcd",
        job_type=JobType.UPDATE_PRICES,
        status=JobStatus.COMPLETED,
        params={},
        result={"updated_count": 12, "unchanged_count": 3, "manual": True},
        error_message=None,
        error_type=None,
        started_at=NOW,
        completed_at=NOW,
        created_at=NOW,
        updated_at=NOW,
    )


@pytest.fixture
def make_job():
    """Factory for persisted-looking Job rows."""

    def make(**overrides) -> Job:
        fields = {
            "id": 1,
            "job_id": "abc123def4567890123456789012abcd",
            "job_type": JobType.UPDATE_PRICES.value,
            "status": JobStatus.PENDING.value,
            "params": {},
            "created_at": NOW,
            "updated_at": NOW,
        }
        fields.update(overrides)
        return Job(**fields)

    return make


@pytest.fixture
def db():
    """Mocked AsyncSession; refresh() fills the server-generated timestamps."""
    session = AsyncMock()
    session.add = MagicMock()

    async def refresh(job):
        job.created_at = job.created_at or NOW
        job.updated_at = NOW

    session.refresh.side_effect = refresh
    return session


@pytest.fixture
def pricing():
    service = MagicMock()
    service.update_all_prices = AsyncMock(
        return_value=PriceUpdateResult(updated_count=12, unchanged_count=3, manual=True)
    )
    return service


@pytest.fixture
def campaigns():
    service = MagicMock()
    service.process_campaigns = AsyncMock(return_value=CampaignTickResult())
    return service
