"""Tests for SSE endpoints and relay status."""

import asyncio

import pytest

from djcafe.features.notifications.relay import (
    SUBSCRIBER_QUEUE_SIZE,
    NotificationRelay,
    format_sse,
    get_campaign_relay,
    get_price_relay,
)
from djcafe.features.notifications.routes import KEEPALIVE_COMMENT, event_stream
from djcafe.main import app


async def next_frame(stream):
    return await anext(stream, None)


@pytest.fixture
def relays():
    price = NotificationRelay("price_update", dsn="postgresql://test@localhost/test")
    campaign = NotificationRelay("campaign_update", dsn="postgresql://test@localhost/test")
    app.dependency_overrides[get_price_relay] = lambda: price
    app.dependency_overrides[get_campaign_relay] = lambda: campaign
    yield price, campaign
    app.dependency_overrides.pop(get_price_relay, None)
    app.dependency_overrides.pop(get_campaign_relay, None)


class TestEventStream:
    @pytest.mark.asyncio
    async def test_connected_frame_then_messages(self, relay):
        subscriber = relay.subscribe()
        relay.broadcast('{"count":2}')
        stream = event_stream(relay, subscriber, keepalive_seconds=5)

        first = await anext(stream)
        second = await anext(stream)
        await stream.aclose()

        assert first.startswith("data: ")
        assert '"type":"connected"' in first
        assert second == 'data: {"count":2}\n\n'

    @pytest.mark.asyncio
    async def test_keepalive_when_idle(self, relay):
        subscriber = relay.subscribe()
        stream = event_stream(relay, subscriber, keepalive_seconds=0.01)

        await anext(stream)
        assert await anext(stream) == KEEPALIVE_COMMENT
        await stream.aclose()

    @pytest.mark.asyncio
    async def test_closing_stream_unsubscribes(self, relay):
        subscriber = relay.subscribe()
        stream = event_stream(relay, subscriber, keepalive_seconds=5)
        await anext(stream)

        await stream.aclose()

        assert relay.client_count == 0
        assert subscriber.closed is True

    @pytest.mark.asyncio
    async def test_overflowed_stream_sends_backlog_then_ends(self, relay):
        subscriber = relay.subscribe()
        for n in range(SUBSCRIBER_QUEUE_SIZE + 1):
            relay.broadcast(f'{{"count":{n}}}')
        assert relay.client_count == 0

        frames = [frame async for frame in event_stream(relay, subscriber, keepalive_seconds=5)]

        assert len(frames) == SUBSCRIBER_QUEUE_SIZE + 1
        assert frames[-1] == format_sse(f'{{"count":{SUBSCRIBER_QUEUE_SIZE - 1}}}')
        assert KEEPALIVE_COMMENT not in frames

    @pytest.mark.asyncio
    async def test_relay_stop_ends_open_stream(self, relay):
        subscriber = relay.subscribe()
        stream = event_stream(relay, subscriber, keepalive_seconds=30)
        await anext(stream)
        pending = asyncio.create_task(next_frame(stream))
        await asyncio.sleep(0)

        await relay.stop()

        assert await asyncio.wait_for(pending, timeout=1) is None


class TestStatusRoute:
    @pytest.mark.asyncio
    async def test_reports_each_relay(self, client, relays):
        price, _campaign = relays
        price.subscribe()
        price.subscribe()

        response = await client.get("/events/status")

        assert response.status_code == 200
        assert response.json() == {
            "relays": [
                {"channel": "price_update", "listening": False, "clients": 2},
                {"channel": "campaign_update", "listening": False, "clients": 0},
            ]
        }
