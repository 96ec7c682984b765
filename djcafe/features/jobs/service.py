"""Manually triggered runs of the pricing engine and the campaign processor.

A job is committed three times: when it is queued, when it starts and when it
finishes. The last commit also delivers the NOTIFY messages queued by the run,
so the TV and admin UI see price and campaign changes once the job is done.
"""

from __future__ import annotations

import uuid
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from djcafe.core.exceptions import BadRequestError, NotFoundError
from djcafe.core.logging import get_logger
from djcafe.features.campaigns.service import CampaignService
from djcafe.features.jobs.models import VALID_JOB_TRANSITIONS, Job, JobStatus, JobType
from djcafe.features.jobs.schemas import JobCreate, JobListResponse, JobResponse
from djcafe.features.pricing.service import PricingService

logger = get_logger(__name__)

Runner = Callable[[AsyncSession], Awaitable[dict[str, Any]]]


class JobService:
    """Queue, run and look up jobs."""

    def __init__(
        self,
        pricing: PricingService | None = None,
        campaigns: CampaignService | None = None,
    ) -> None:
        self.pricing = pricing or PricingService()
        self.campaigns = campaigns or CampaignService(pricing=self.pricing)
        self._runners: dict[JobType, Runner] = {
            JobType.UPDATE_PRICES: self._update_prices,
            JobType.PROCESS_CAMPAIGNS: self._process_campaigns,
        }

    async def create_job(self, db: AsyncSession, job_create: JobCreate) -> JobResponse:
        """Record a job and run it before responding.

        The response carries the final state: ``completed`` with a result, or
        ``failed`` with the error.
        """
        job = Job(
            job_id=uuid.uuid4().hex,
            job_type=job_create.job_type.value,
            status=JobStatus.PENDING.value,
            params=job_create.params,
        )
        db.add(job)
        await db.commit()
        await db.refresh(job)
        logger.info("jobs.job_created", job_id=job.job_id, job_type=job.job_type)

        await self._run(db, job)
        return JobResponse.model_validate(job)

    async def get_job(self, db: AsyncSession, job_id: str) -> JobResponse:
        """Raises NotFoundError for an unknown ``job_id``."""
        return JobResponse.model_validate(await self._load(db, job_id))

    async def list_jobs(
        self,
        db: AsyncSession,
        page: int = 1,
        page_size: int = 20,
        job_type: JobType | None = None,
        status: JobStatus | None = None,
    ) -> JobListResponse:
        """Newest jobs first, optionally narrowed by type and status."""
        filters = []
        if job_type is not None:
            filters.append(Job.job_type == job_type.value)
        if status is not None:
            filters.append(Job.status == status.value)

        total = (
            await db.execute(select(func.count()).select_from(Job).where(*filters))
        ).scalar_one()
        rows = await db.execute(
            select(Job)
            .where(*filters)
            .order_by(Job.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )

        return JobListResponse(
            jobs=[JobResponse.model_validate(job) for job in rows.scalars()],
            total=total,
            page=page,
            page_size=page_size,
        )

    async def cancel_job(self, db: AsyncSession, job_id: str) -> JobResponse:
        """Cancel a job that has not started.

        Raises:
            NotFoundError: Unknown ``job_id``.
            BadRequestError: The job already started or finished.
        """
        job = await self._load(db, job_id)
        if JobStatus.CANCELLED not in VALID_JOB_TRANSITIONS[JobStatus(job.status)]:
            raise BadRequestError(
                f"Cannot cancel job in status '{job.status}'",
                details={"job_id": job_id, "status": job.status},
            )

        job.status = JobStatus.CANCELLED.value
        job.completed_at = datetime.now(UTC)
        await db.commit()
        await db.refresh(job)

        logger.info("jobs.job_cancelled", job_id=job_id)
        return JobResponse.model_validate(job)

    async def _load(self, db: AsyncSession, job_id: str) -> Job:
        job = (await db.execute(select(Job).where(Job.job_id == job_id))).scalar_one_or_none()
        if job is None:
            raise NotFoundError(f"Job not found: {job_id}", details={"job_id": job_id})
        return job

    async def _run(self, db: AsyncSession, job: Job) -> None:
        job_id = job.job_id
        job_type = JobType(job.job_type)
        runner = self._runners[job_type]

        job.status = JobStatus.RUNNING.value
        job.started_at = datetime.now(UTC)
        await db.commit()
        logger.info("jobs.job_started", job_id=job_id, job_type=job_type.value)

        try:
            result = await runner(db)
        except Exception as e:
            # Partial price or campaign changes must not be committed with the
            # failure. Rollback expires the job, so reload it before writing.
            await db.rollback()
            await db.refresh(job)
            job.status = JobStatus.FAILED.value
            job.error_message = str(e)[:2000]
            job.error_type = type(e).__name__
            logger.error(
                "jobs.job_failed",
                job_id=job_id,
                job_type=job_type.value,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
        else:
            job.result = result
            job.status = JobStatus.COMPLETED.value
            logger.info("jobs.job_completed", job_id=job_id, job_type=job_type.value)

        job.completed_at = datetime.now(UTC)
        await db.commit()
        await db.refresh(job)

    async def _update_prices(self, db: AsyncSession) -> dict[str, Any]:
        result = await self.pricing.update_all_prices(db, manual=True)
        return result.model_dump()

    async def _process_campaigns(self, db: AsyncSession) -> dict[str, Any]:
        tick = await self.campaigns.process_campaigns(db)
        return tick.model_dump(mode="json")
