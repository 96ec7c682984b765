"""Jobs: tracked manual runs and the in-process scheduler."""

from djcafe.features.jobs.models import Job, JobStatus, JobType
from djcafe.features.jobs.routes import router
from djcafe.features.jobs.scheduler import PriceScheduler
from djcafe.features.jobs.schemas import (
    JobCreate,
    JobListResponse,
    JobResponse,
)
from djcafe.features.jobs.service import JobService

__all__ = [
    "Job",
    "JobCreate",
    "JobListResponse",
    "JobResponse",
    "JobService",
    "JobStatus",
    "JobType",
    "PriceScheduler",
    "router",
]
