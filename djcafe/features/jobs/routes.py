"""API routes for running and monitoring jobs."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from djcafe.core.database import get_db
from djcafe.features.jobs.models import JobStatus, JobType
from djcafe.features.jobs.schemas import (
    JobCreate,
    JobListResponse,
    JobResponse,
)
from djcafe.features.jobs.service import JobService

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post(
    "",
    response_model=JobResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Create and execute a job",
    description="""
Run a background task now and return the finished job.

**Job Types**:
- `update_prices`: the admin "change prices now" button. Result holds
  `updated_count` and `unchanged_count`; connected TVs get a `price_update`
  event when anything changed.
- `process_campaigns`: one campaign processor tick. Result lists the campaign
  IDs that `started`, began `playing` and `completed`.

Jobs execute synchronously but return 202 Accepted. Failed runs are recorded
with `error_message` and `error_type`.

Example:
```json
{"job_type": "update_prices"}
```
""",
)
async def create_job(
    job_create: JobCreate,
    db: AsyncSession = Depends(get_db),
) -> JobResponse:
    """Create and execute a job."""
    return await JobService().create_job(db=db, job_create=job_create)


@router.get(
    "",
    response_model=JobListResponse,
    summary="List jobs",
    description="Jobs newest first, filterable by `job_type` and `status`.",
)
async def list_jobs(
    db: AsyncSession = Depends(get_db),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(20, ge=1, le=100, description="Jobs per page (max 100)"),
    job_type: JobType | None = Query(None, description="Filter by job type"),
    status: JobStatus | None = Query(None, description="Filter by status"),
) -> JobListResponse:
    """List jobs with pagination and filtering."""
    return await JobService().list_jobs(
        db=db,
        page=page,
        page_size=page_size,
        job_type=job_type,
        status=status,
    )


@router.get("/{job_id}", response_model=JobResponse, summary="Get job by ID")
async def get_job(
    job_id: str,
    db: AsyncSession = Depends(get_db),
) -> JobResponse:
    """Get job details; 404 if the job does not exist."""
    return await JobService().get_job(db=db, job_id=job_id)


@router.delete(
    "/{job_id}",
    response_model=JobResponse,
    summary="Cancel a pending job",
    description="Only pending jobs can be cancelled (400 otherwise, 404 if unknown).",
)
async def cancel_job(
    job_id: str,
    db: AsyncSession = Depends(get_db),
) -> JobResponse:
    return await JobService().cancel_job(db=db, job_id=job_id)
