"""Shared Pydantic schemas for API responses."""

import uuid

from pydantic import BaseModel, Field


class IdList(BaseModel):
    """Request body for bulk operations on a selection of rows."""

    ids: list[uuid.UUID] = Field(..., min_length=1, description="Selected row IDs")


class CountResponse(BaseModel):
    """Number of rows touched by a bulk operation."""

    count: int = Field(..., ge=0)
