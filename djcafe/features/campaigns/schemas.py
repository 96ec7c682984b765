"""Pydantic schemas for video, campaign and quick ad endpoints."""

import uuid
from datetime import UTC, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from djcafe.features.campaigns.models import (
    COUNTDOWN_CHOICES,
    AspectRatio,
    CampaignStatus,
    ImageMode,
    VideoStatus,
)

# =============================================================================
# Videos
# =============================================================================


class VideoCreate(BaseModel):
    """Register a promo video already present under the media root."""

    name: str = Field(..., min_length=1, max_length=200)
    prompt: str = Field("", description="Description or generation prompt")
    url: str | None = Field(None, description="Public path, e.g. /videos/promo.mp4")
    thumbnail_url: str | None = None
    duration: int = Field(..., ge=1, le=600, description="Length in seconds")
    aspect_ratio: AspectRatio = AspectRatio.LANDSCAPE
    status: VideoStatus = VideoStatus.READY
    created_by: str | None = None


class VideoResponse(BaseModel):
    """Video record."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    prompt: str
    url: str | None
    thumbnail_url: str | None
    duration: int
    aspect_ratio: AspectRatio
    status: VideoStatus
    error_message: str | None
    created_by: str | None
    created_at: datetime


# =============================================================================
# Campaigns
# =============================================================================


class CampaignCreate(BaseModel):
    """Schedule a video on the TV.

    A product highlight is optional; when ``product_id`` is set the
    promotional price is required and is applied when the video ends.
    """

    video_id: uuid.UUID
    scheduled_at: datetime = Field(..., description="Start of the countdown (must be in the future)")
    countdown_seconds: int = Field(60, description="One of 0, 10, 30, 60, 120, 300")
    product_id: uuid.UUID | None = None
    promotional_price: Decimal | None = Field(None, gt=0)
    highlight_duration_seconds: int = Field(5, ge=3, le=15)
    created_by: str | None = None

    @field_validator("scheduled_at")
    @classmethod
    def validate_future(cls, v: datetime) -> datetime:
        """Naive datetimes are taken as UTC; the time must be in the future."""
        if v.tzinfo is None:
            v = v.replace(tzinfo=UTC)
        if v <= datetime.now(UTC):
            raise ValueError("Scheduled time must be in the future")
        return v

    @field_validator("countdown_seconds")
    @classmethod
    def validate_countdown(cls, v: int) -> int:
        """Countdown must be one of the offered durations."""
        if v not in COUNTDOWN_CHOICES:
            choices = ", ".join(str(c) for c in sorted(COUNTDOWN_CHOICES))
            raise ValueError(f"Countdown must be one of: {choices}")
        return v

    @model_validator(mode="after")
    def validate_highlight(self) -> "CampaignCreate":
        """A highlighted product needs a promotional price."""
        if self.product_id is not None and self.promotional_price is None:
            raise ValueError("Enter a promotional price for the selected product")
        return self


class CampaignResponse(BaseModel):
    """Campaign with video and product names."""

    id: uuid.UUID
    video_id: uuid.UUID
    scheduled_at: datetime
    countdown_seconds: int
    status: CampaignStatus
    started_at: datetime | None = None
    completed_at: datetime | None = None
    created_by: str | None = None
    created_at: datetime
    video_name: str | None = None
    video_url: str | None = None
    video_thumbnail_url: str | None = None
    video_duration: int | None = None
    video_aspect_ratio: AspectRatio | None = None
    product_id: uuid.UUID | None = None
    product_name: str | None = None
    promotional_price: Decimal | None = None
    highlight_duration_seconds: int | None = None


class CampaignTickResult(BaseModel):
    """Transitions made by one campaign processor tick."""

    started: list[uuid.UUID] = Field(default_factory=list)
    playing: list[uuid.UUID] = Field(default_factory=list)
    completed: list[uuid.UUID] = Field(default_factory=list)


# =============================================================================
# Quick ads
# =============================================================================


class QuickAdCreate(BaseModel):
    """Create a quick ad: a product, some text, or an image."""

    name: str = Field(..., min_length=1, max_length=200)
    product_id: uuid.UUID | None = None
    promotional_price: Decimal | None = Field(None, gt=0)
    update_price: bool = False
    display_text: str | None = None
    display_price: str | None = None
    image_base64: str | None = Field(None, description="Image as a data URI")
    image_mode: ImageMode | None = None
    duration_seconds: int = Field(..., ge=3, le=30)
    created_by: str | None = None

    @model_validator(mode="after")
    def validate_content(self) -> "QuickAdCreate":
        """Needs something to show; a product needs a price."""
        if not (self.product_id or self.display_text or self.image_base64):
            raise ValueError("Choose a product, enter text, or add an image")
        if self.product_id is not None and self.promotional_price is None:
            raise ValueError("Enter a price for the selected product")
        return self


class QuickAdUpdate(BaseModel):
    """Replace the editable fields of a quick ad."""

    name: str = Field(..., min_length=1, max_length=200)
    product_id: uuid.UUID | None = None
    promotional_price: Decimal | None = Field(None, gt=0)
    update_price: bool = False
    display_text: str | None = None
    display_price: str | None = None
    image_base64: str | None = None
    image_mode: ImageMode | None = None
    remove_image: bool = False
    duration_seconds: int = Field(..., ge=3, le=30)

    @model_validator(mode="after")
    def validate_content(self) -> "QuickAdUpdate":
        """Needs something to show; an existing image counts via image_mode."""
        if not (self.product_id or self.display_text or self.image_base64 or self.image_mode):
            raise ValueError("Choose a product, enter text, or add an image")
        if self.product_id is not None and self.promotional_price is None:
            raise ValueError("Enter a price for the selected product")
        return self


class QuickAdResponse(BaseModel):
    """Quick ad with product info (null for free-text ads)."""

    id: uuid.UUID
    name: str
    product_id: uuid.UUID | None = None
    promotional_price: Decimal | None = None
    update_price: bool
    display_text: str | None = None
    display_price: str | None = None
    image_url: str | None = None
    image_mode: ImageMode | None = None
    duration_seconds: int
    last_played_at: datetime | None = None
    created_at: datetime
    product_name: str | None = None
    current_price: Decimal | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
