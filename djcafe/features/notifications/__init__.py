"""Real-time notifications: PostgreSQL LISTEN/NOTIFY relayed to SSE clients."""

from djcafe.features.notifications.publisher import publish
from djcafe.features.notifications.relay import (
    NotificationRelay,
    Subscriber,
    get_campaign_relay,
    get_price_relay,
)
from djcafe.features.notifications.routes import router
from djcafe.features.notifications.schemas import (
    CAMPAIGN_CHANNEL,
    PRICE_CHANNEL,
    CampaignEvent,
    CampaignEventType,
    PriceUpdateEvent,
)

__all__ = [
    "CAMPAIGN_CHANNEL",
    "PRICE_CHANNEL",
    "CampaignEvent",
    "CampaignEventType",
    "NotificationRelay",
    "PriceUpdateEvent",
    "Subscriber",
    "get_campaign_relay",
    "get_price_relay",
    "publish",
    "router",
]
