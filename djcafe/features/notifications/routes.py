"""SSE endpoints streaming price and campaign notifications."""

from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from djcafe.core.config import get_settings
from djcafe.core.logging import get_logger
from djcafe.features.notifications.relay import (
    NotificationRelay,
    Subscriber,
    SubscriberClosedError,
    format_sse,
    get_campaign_relay,
    get_price_relay,
)
from djcafe.features.notifications.schemas import (
    ConnectedEvent,
    NotificationStatusResponse,
    RelayStatus,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/events", tags=["events"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}
KEEPALIVE_COMMENT = ": ping\n\n"


async def event_stream(
    relay: NotificationRelay,
    subscriber: Subscriber,
    keepalive_seconds: float,
) -> AsyncIterator[str]:
    """Yield SSE frames for one client until it disconnects or is dropped.

    The first frame announces the connection; a comment line is sent whenever
    ``keepalive_seconds`` pass without a notification. A subscriber dropped by
    the relay (backlog overflow, shutdown) ends the stream once its queued
    messages are sent, so the EventSource reconnects.
    """
    try:
        yield format_sse(ConnectedEvent().to_payload())
        while True:
            try:
                message = await subscriber.next_message(timeout=keepalive_seconds)
            except SubscriberClosedError:
                logger.info("notifications.stream_ended", channel=relay.channel)
                return
            yield KEEPALIVE_COMMENT if message is None else message
    finally:
        relay.unsubscribe(subscriber)


async def _stream(relay: NotificationRelay) -> StreamingResponse:
    await relay.start()
    subscriber = relay.subscribe()
    return StreamingResponse(
        event_stream(relay, subscriber, get_settings().sse_keepalive_seconds),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.get(
    "/prices",
    summary="Price update stream",
    description="""
Server-Sent Events stream. Each `data:` frame carries the raw `price_update`
payload, e.g. `{"count": 3, "timestamp": "..."}`. Clients refetch prices on
every frame.
""",
)
async def stream_prices(
    relay: NotificationRelay = Depends(get_price_relay),
) -> StreamingResponse:
    """Subscribe to price updates."""
    return await _stream(relay)


@router.get(
    "/campaigns",
    summary="TV campaign event stream",
    description="""
Server-Sent Events stream of `campaign_update` payloads:
`COUNTDOWN_START`, `VIDEO_PLAY`, `VIDEO_END`, `CANCELLED`, `QUICK_AD_PLAY`.
""",
)
async def stream_campaigns(
    relay: NotificationRelay = Depends(get_campaign_relay),
) -> StreamingResponse:
    """Subscribe to TV campaign events."""
    return await _stream(relay)


@router.get(
    "/status",
    response_model=NotificationStatusResponse,
    summary="Relay status",
)
async def relay_status(
    price_relay: NotificationRelay = Depends(get_price_relay),
    campaign_relay: NotificationRelay = Depends(get_campaign_relay),
) -> NotificationStatusResponse:
    """Report whether each relay is listening and how many clients it serves."""
    return NotificationStatusResponse(
        relays=[
            RelayStatus(
                channel=relay.channel,
                listening=relay.listening,
                clients=relay.client_count,
            )
            for relay in (price_relay, campaign_relay)
        ]
    )
