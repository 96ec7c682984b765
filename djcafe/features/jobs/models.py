"""Job ORM model for tracked background work.

Jobs record manual or scheduled runs of the pricing engine and the campaign
processor, with parameters and results stored as JSONB.
"""

from __future__ import annotations

import datetime
from enum import Enum
from typing import Any

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from djcafe.core.database import Base
from djcafe.shared.models import TimestampMixin


class JobType(str, Enum):
    """Kinds of background work.

    - UPDATE_PRICES: one dynamic pricing window over all active products
    - PROCESS_CAMPAIGNS: one campaign processor tick
    """

    UPDATE_PRICES = "update_prices"
    PROCESS_CAMPAIGNS = "process_campaigns"


class JobStatus(str, Enum):
    """Job lifecycle states.

    State transitions:
    - PENDING -> RUNNING -> COMPLETED | FAILED
    - PENDING -> CANCELLED (via DELETE endpoint)
    """

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


VALID_JOB_TRANSITIONS: dict[JobStatus, set[JobStatus]] = {
    JobStatus.PENDING: {JobStatus.RUNNING, JobStatus.CANCELLED},
    JobStatus.RUNNING: {JobStatus.COMPLETED, JobStatus.FAILED},
    JobStatus.COMPLETED: set(),
    JobStatus.FAILED: set(),
    JobStatus.CANCELLED: set(),
}


class Job(TimestampMixin, Base):
    """Tracked run of a background task.

    Attributes:
        job_id: External identifier (UUID hex, 32 chars).
        params: Job parameters as JSONB.
        result: Job output as JSONB (null until completed).
        error_message: Error details if status=FAILED.
        error_type: Exception class name if status=FAILED.
    """

    __tablename__ = "jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    job_id: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    job_type: Mapped[str] = mapped_column(String(20), index=True)
    status: Mapped[str] = mapped_column(String(20), default=JobStatus.PENDING.value, index=True)

    params: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)
    result: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    error_message: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    error_type: Mapped[str | None] = mapped_column(String(100), nullable=True)

    started_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_jobs_type_status", "job_type", "status"),
        CheckConstraint(
            "status IN ('pending', 'running', 'completed', 'failed', 'cancelled')",
            name="ck_jobs_valid_status",
        ),
        CheckConstraint(
            "job_type IN ('update_prices', 'process_campaigns')",
            name="ck_jobs_valid_type",
        ),
    )
