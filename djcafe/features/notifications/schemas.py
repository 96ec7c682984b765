"""Notification payloads carried over LISTEN/NOTIFY and SSE.

Payloads travel as raw JSON strings: the relay never parses them, it only
wraps each one in an SSE ``data:`` frame.
"""

import uuid
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PRICE_CHANNEL = "price_update"
CAMPAIGN_CHANNEL = "campaign_update"


class CampaignEventType(str, Enum):
    """Events the TV display reacts to on the campaign channel."""

    COUNTDOWN_START = "COUNTDOWN_START"
    VIDEO_PLAY = "VIDEO_PLAY"
    VIDEO_END = "VIDEO_END"
    CANCELLED = "CANCELLED"
    QUICK_AD_PLAY = "QUICK_AD_PLAY"


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class NotificationPayload(BaseModel):
    """Base for NOTIFY payloads; serialized with camelCase keys for the TV client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> str:
        """JSON text sent as the NOTIFY payload."""
        return self.model_dump_json(by_alias=True)


class PriceUpdateEvent(NotificationPayload):
    """Sent on ``price_update`` whenever at least one price changed."""

    count: int = Field(..., ge=1, description="Number of products whose price changed")
    timestamp: datetime = Field(default_factory=utcnow)


class HighlightPayload(NotificationPayload):
    """Product price highlight shown after a campaign video."""

    product_id: uuid.UUID
    product_name: str
    new_price: Decimal
    old_price: Decimal
    duration_seconds: int


class CampaignPayload(NotificationPayload):
    """Campaign snapshot sent with campaign events."""

    id: uuid.UUID
    video_id: uuid.UUID | None = None
    video_url: str | None = None
    video_name: str | None = None
    video_duration: int | None = None
    countdown_seconds: int | None = None
    highlight: HighlightPayload | None = None


class QuickAdPayload(NotificationPayload):
    """Instant TV overlay."""

    id: uuid.UUID
    display_text: str
    price: str | None = None
    old_price: str | None = None
    image_url: str | None = None
    image_mode: str | None = None
    duration_seconds: int


class CampaignEvent(NotificationPayload):
    """Sent on ``campaign_update``."""

    type: CampaignEventType
    campaign: CampaignPayload | None = None
    quick_ad: QuickAdPayload | None = None
    timestamp: datetime = Field(default_factory=utcnow)


class ConnectedEvent(NotificationPayload):
    """First frame of every SSE stream."""

    type: str = "connected"
    timestamp: datetime = Field(default_factory=utcnow)


class RelayStatus(BaseModel):
    """State of one LISTEN relay."""

    channel: str
    listening: bool
    clients: int


class NotificationStatusResponse(BaseModel):
    """Response for GET /events/status."""

    relays: list[RelayStatus]
