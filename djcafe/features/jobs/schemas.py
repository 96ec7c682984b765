"""Pydantic schemas for job endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from djcafe.features.jobs.models import JobStatus, JobType


class JobCreate(BaseModel):
    """Request schema for running a job.

    **Job Types**:

    - **update_prices**: run the pricing engine now (admin "change prices now")
    - **process_campaigns**: advance due video campaigns now

    Neither type takes parameters; ``params`` is stored with the job as given.
    """

    job_type: JobType = Field(
        ...,
        description="Type of job to execute: 'update_prices' or 'process_campaigns'.",
    )
    params: dict[str, Any] = Field(
        default_factory=dict,
        description="Optional job parameters, stored with the job.",
    )


class JobResponse(BaseModel):
    """A job with its status and result."""

    model_config = ConfigDict(from_attributes=True)

    job_id: str = Field(..., description="Unique job identifier (32-char hex).")
    job_type: JobType
    status: JobStatus
    params: dict[str, Any]
    result: dict[str, Any] | None = Field(
        None,
        description="Job result (null until completed). Structure depends on job_type.",
    )
    error_message: str | None = Field(None, description="Error details if status='failed'.")
    error_type: str | None = Field(None, description="Exception class name if status='failed'.")
    started_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class JobListResponse(BaseModel):
    """Paginated list of jobs."""

    jobs: list[JobResponse]
    total: int = Field(..., ge=0, description="Jobs matching the filters.")
    page: int = Field(..., ge=1, description="Current page number (1-indexed).")
    page_size: int = Field(..., ge=1, description="Jobs per page (max 100).")
