"""Overlay sequencing for the TV display.

A campaign runs as a fixed timeline measured from ``started_at``::

    |-- countdown --|------ video ------|-- highlight --|
    0           countdown      countdown+video     +highlight

The highlight phase exists only when the campaign promotes a product.
Everything here is pure so that the TV and the polling endpoint agree on
the phase for any instant.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Protocol
from uuid import UUID


class OverlayKind(str, Enum):
    """What the TV shows on top of the price board."""

    IDLE = "idle"
    COUNTDOWN = "countdown"
    VIDEO = "video"
    HIGHLIGHT = "highlight"
    QUICK_AD = "quick_ad"


class CampaignTimeline(Protocol):
    """Campaign fields the sequencer reads."""

    status: str
    started_at: datetime | None
    countdown_seconds: int
    video_duration: int | None
    product_id: UUID | None
    promotional_price: Decimal | None
    highlight_duration_seconds: int | None


@dataclass(frozen=True)
class Overlay:
    """Resolved overlay and whole seconds until it ends."""

    kind: OverlayKind
    remaining_seconds: int = 0

    @property
    def label(self) -> str | None:
        """MM:SS for countdowns, None otherwise."""
        if self.kind is OverlayKind.COUNTDOWN:
            return format_countdown(self.remaining_seconds)
        return None


IDLE = Overlay(OverlayKind.IDLE)

_NOT_RUNNING = ("scheduled", "cancelled")


def format_countdown(seconds: int | float) -> str:
    """Format seconds as MM:SS (negative values show 00:00)."""
    total = max(0, int(seconds))
    minutes, secs = divmod(total, 60)
    return f"{minutes:02d}:{secs:02d}"


def _remaining(end: float, elapsed: float) -> int:
    return max(1, math.ceil(end - elapsed))


def resolve_overlay(campaign: CampaignTimeline | None, now: datetime) -> Overlay:
    """Overlay the TV should show for a campaign at ``now``.

    Args:
        campaign: Campaign with its video duration, or None.
        now: Aware datetime.

    Returns:
        The phase and seconds remaining in it; IDLE when the campaign has not
        started, was cancelled, or its timeline is over.
    """
    if campaign is None or campaign.started_at is None or campaign.status in _NOT_RUNNING:
        return IDLE

    elapsed = (now - campaign.started_at).total_seconds()
    if elapsed < 0:
        return IDLE

    countdown_end = float(campaign.countdown_seconds)
    if elapsed < countdown_end:
        return Overlay(OverlayKind.COUNTDOWN, _remaining(countdown_end, elapsed))

    video_end = countdown_end + (campaign.video_duration or 0)
    if elapsed < video_end:
        return Overlay(OverlayKind.VIDEO, _remaining(video_end, elapsed))

    if campaign.product_id is not None and campaign.promotional_price is not None:
        highlight_end = video_end + (campaign.highlight_duration_seconds or 0)
        if elapsed < highlight_end:
            return Overlay(OverlayKind.HIGHLIGHT, _remaining(highlight_end, elapsed))

    return IDLE


def quick_ad_remaining(last_played_at: datetime | None, duration_seconds: int, now: datetime) -> int:
    """Seconds a played quick ad stays on screen; 0 once it is over."""
    if last_played_at is None:
        return 0
    left = duration_seconds - (now - last_played_at).total_seconds()
    return math.ceil(left) if left > 0 else 0
