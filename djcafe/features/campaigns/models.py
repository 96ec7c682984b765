"""ORM models for TV promotion: videos, scheduled video campaigns, quick ads.

Campaign lifecycle:
- SCHEDULED -> COUNTDOWN -> PLAYING -> COMPLETED
- SCHEDULED -> PLAYING (countdown of 0 seconds)
- any non-terminal state -> CANCELLED
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from djcafe.core.database import Base
from djcafe.features.catalog.models import Product
from djcafe.shared.models import TimestampMixin, UUIDPrimaryKeyMixin


class VideoStatus(str, Enum):
    """Availability of a promo video."""

    PENDING = "pending"
    GENERATING = "generating"
    READY = "ready"
    FAILED = "failed"


class AspectRatio(str, Enum):
    """Orientation of a promo video."""

    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"


class CampaignStatus(str, Enum):
    """Video campaign lifecycle states."""

    SCHEDULED = "scheduled"
    COUNTDOWN = "countdown"
    PLAYING = "playing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


ACTIVE_CAMPAIGN_STATUSES = (CampaignStatus.COUNTDOWN.value, CampaignStatus.PLAYING.value)

COUNTDOWN_CHOICES = frozenset({0, 10, 30, 60, 120, 300})


class ImageMode(str, Enum):
    """How a quick ad image is laid out on the TV."""

    FULLSCREEN = "fullscreen"
    BACKGROUND = "background"


class Video(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Promo video file served from the media root.

    Attributes:
        url: Public path of the video file (e.g. /videos/<id>.mp4), null until ready.
        thumbnail_url: Public path of the poster image.
        duration: Playback length in seconds.
    """

    __tablename__ = "videos"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    prompt: Mapped[str] = mapped_column(Text, nullable=False, default="")
    url: Mapped[str | None] = mapped_column(Text, nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    aspect_ratio: Mapped[str] = mapped_column(
        String(10), nullable=False, default=AspectRatio.LANDSCAPE.value
    )
    status: Mapped[str] = mapped_column(
        String(12), nullable=False, default=VideoStatus.PENDING.value
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(200), nullable=True)

    campaigns: Mapped[list[VideoCampaign]] = relationship(
        back_populates="video", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'generating', 'ready', 'failed')",
            name="ck_videos_valid_status",
        ),
        CheckConstraint(
            "aspect_ratio IN ('landscape', 'portrait')",
            name="ck_videos_valid_aspect_ratio",
        ),
        CheckConstraint("duration > 0", name="ck_videos_positive_duration"),
    )


class VideoCampaign(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Scheduled playback of a video on the TV, optionally ending in a price highlight.

    Attributes:
        scheduled_at: When the countdown should start.
        countdown_seconds: Countdown shown before the video plays.
        started_at: When the countdown (or playback, for a zero countdown) began.
        product_id: Product highlighted after the video.
        promotional_price: Price applied to the product when the video ends.
        highlight_duration_seconds: How long the highlight stays on screen.
    """

    __tablename__ = "video_campaigns"

    video_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False
    )
    scheduled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    countdown_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    status: Mapped[str] = mapped_column(
        String(12), nullable=False, default=CampaignStatus.SCHEDULED.value, index=True
    )
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    product_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("products.id", ondelete="SET NULL"), nullable=True
    )
    promotional_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    highlight_duration_seconds: Mapped[int | None] = mapped_column(
        Integer, nullable=True, default=5
    )
    created_by: Mapped[str | None] = mapped_column(String(200), nullable=True)

    video: Mapped[Video] = relationship(back_populates="campaigns")
    product: Mapped[Product | None] = relationship()

    __table_args__ = (
        Index("ix_video_campaigns_status_scheduled", "status", "scheduled_at"),
        CheckConstraint(
            "status IN ('scheduled', 'countdown', 'playing', 'completed', 'cancelled')",
            name="ck_video_campaigns_valid_status",
        ),
        CheckConstraint("countdown_seconds >= 0", name="ck_video_campaigns_countdown"),
    )


class QuickAd(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Reusable instant TV overlay: a product at a promo price, free text, or an image.

    Attributes:
        update_price: Whether playing the ad also sets the product price.
        display_text: Free text shown when there is no product.
        display_price: Free-form price label for free-text ads.
        image_url: Public path of the uploaded image (/ads/<id>.<ext>).
        last_played_at: When the ad was last sent to the TV.
    """

    __tablename__ = "quick_ads"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    product_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("products.id", ondelete="SET NULL"), nullable=True
    )
    promotional_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    update_price: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    display_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    display_price: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_mode: Mapped[str | None] = mapped_column(String(10), nullable=True)
    duration_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    last_played_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_by: Mapped[str | None] = mapped_column(String(200), nullable=True)

    product: Mapped[Product | None] = relationship()

    __table_args__ = (
        CheckConstraint(
            "image_mode IS NULL OR image_mode IN ('fullscreen', 'background')",
            name="ck_quick_ads_valid_image_mode",
        ),
        CheckConstraint(
            "duration_seconds BETWEEN 3 AND 30",
            name="ck_quick_ads_duration_range",
        ),
    )
