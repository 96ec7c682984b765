"""Tests for the LISTEN -> SSE relay."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from djcafe.features.notifications.relay import (
    NotificationRelay,
    Subscriber,
    SubscriberClosedError,
    format_sse,
)


async def wait_for(predicate, attempts: int = 100) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


class TestFormatSse:
    def test_wraps_payload_in_data_frame(self):
        assert format_sse('{"count": 2}') == 'data: {"count": 2}\n\n'


class TestSubscriber:
    def test_offer_after_close_fails(self):
        subscriber = Subscriber()
        subscriber.close()
        with pytest.raises(SubscriberClosedError):
            subscriber.offer("data: x\n\n")

    def test_full_queue_closes_subscriber(self):
        subscriber = Subscriber(maxsize=1)
        subscriber.offer("first")

        with pytest.raises(SubscriberClosedError):
            subscriber.offer("second")
        assert subscriber.closed is True

    @pytest.mark.asyncio
    async def test_next_message_times_out(self):
        subscriber = Subscriber()
        assert await subscriber.next_message(timeout=0.01) is None

    @pytest.mark.asyncio
    async def test_next_message_returns_queued(self):
        subscriber = Subscriber()
        subscriber.offer("hello")
        assert await subscriber.next_message(timeout=1) == "hello"

    @pytest.mark.asyncio
    async def test_backlog_drained_after_close(self):
        subscriber = Subscriber(maxsize=1)
        subscriber.offer("kept")
        with pytest.raises(SubscriberClosedError):
            subscriber.offer("overflow")

        assert await subscriber.next_message(timeout=1) == "kept"
        with pytest.raises(SubscriberClosedError):
            await subscriber.next_message(timeout=1)

    @pytest.mark.asyncio
    async def test_close_wakes_waiting_reader(self):
        subscriber = Subscriber()
        reader = asyncio.create_task(subscriber.next_message(timeout=30))
        await asyncio.sleep(0)

        subscriber.close()

        with pytest.raises(SubscriberClosedError):
            await asyncio.wait_for(reader, timeout=1)


class TestBroadcast:
    def test_no_subscribers(self, relay):
        assert relay.broadcast("{}") == 0

    def test_delivers_in_connection_order(self, relay):
        first = relay.subscribe()
        second = relay.subscribe()

        delivered = relay.broadcast('{"count": 1}')

        assert delivered == 2
        assert list(relay._subscribers) == [first, second]
        assert first.queue.get_nowait() == 'data: {"count": 1}\n\n'
        assert second.queue.get_nowait() == 'data: {"count": 1}\n\n'

    def test_dead_subscribers_pruned_after_pass(self, relay):
        alive = relay.subscribe()
        dead = relay.subscribe()
        dead.close()
        last = relay.subscribe()

        delivered = relay.broadcast("{}")

        assert delivered == 2
        assert relay.client_count == 2
        assert dead not in relay._subscribers
        assert not alive.queue.empty()
        assert not last.queue.empty()

    def test_slow_subscriber_dropped(self, relay):
        slow = Subscriber(maxsize=1)
        relay._subscribers[slow] = None
        relay.broadcast("one")

        relay.broadcast("two")

        assert relay.client_count == 0

    def test_unsubscribe_unknown_is_noop(self, relay):
        relay.subscribe()
        relay.unsubscribe(Subscriber())
        assert relay.client_count == 1


class TestNotificationCallback:
    def test_other_channel_ignored(self, relay):
        subscriber = relay.subscribe()
        relay._on_notification(None, 1, "campaign_update", "{}")
        assert subscriber.queue.empty()

    def test_empty_payload_ignored(self, relay):
        subscriber = relay.subscribe()
        relay._on_notification(None, 1, "price_update", "")
        assert subscriber.queue.empty()

    def test_payload_broadcast_verbatim(self, relay):
        subscriber = relay.subscribe()
        relay._on_notification(None, 1, "price_update", '{"count":3}')
        assert subscriber.queue.get_nowait() == 'data: {"count":3}\n\n'


class TestListenLoop:
    @pytest.mark.asyncio
    async def test_listens_and_relays(self, fake_connection):
        relay = NotificationRelay(
            "price_update",
            dsn="postgresql://test@localhost/test",
            reconnect_delay=0,
            connect=AsyncMock(return_value=fake_connection),
        )
        subscriber = relay.subscribe()

        await relay.start()
        await wait_for(lambda: relay.listening)
        fake_connection.notify("price_update", '{"count":1}')
        await relay.stop()

        assert subscriber.queue.get_nowait() == 'data: {"count":1}\n\n'
        assert fake_connection.closed is True
        assert relay.listening is False

    @pytest.mark.asyncio
    async def test_reconnects_after_connect_failure(self, fake_connection):
        connect = AsyncMock(side_effect=[OSError("connection refused"), fake_connection])
        relay = NotificationRelay(
            "price_update",
            dsn="postgresql://test@localhost/test",
            reconnect_delay=0,
            connect=connect,
        )

        await relay.start()
        await wait_for(lambda: relay.listening)
        await relay.stop()

        assert connect.await_count == 2

    @pytest.mark.asyncio
    async def test_reconnects_after_connection_lost(self, make_connection):
        first, second = make_connection(), make_connection()
        connect = AsyncMock(side_effect=[first, second])
        relay = NotificationRelay(
            "price_update",
            dsn="postgresql://test@localhost/test",
            reconnect_delay=0,
            connect=connect,
        )
        subscriber = relay.subscribe()

        await relay.start()
        await wait_for(lambda: relay.listening)
        first.terminate()
        await wait_for(lambda: connect.await_count == 2 and relay.listening)
        second.notify("price_update", "{}")
        await relay.stop()

        assert subscriber.queue.get_nowait() == "data: {}\n\n"
        assert relay.client_count == 1

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, fake_connection):
        connect = AsyncMock(return_value=fake_connection)
        relay = NotificationRelay(
            "price_update",
            dsn="postgresql://test@localhost/test",
            connect=connect,
        )

        await relay.start()
        await relay.start()
        await wait_for(lambda: relay.listening)
        await relay.stop()

        connect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_stop_without_start(self, relay):
        await relay.stop()
        assert relay.listening is False

    @pytest.mark.asyncio
    async def test_stop_closes_subscribers(self, relay):
        first = relay.subscribe()
        second = relay.subscribe()

        await relay.stop()

        assert first.closed is True
        assert second.closed is True
        assert relay.client_count == 0
