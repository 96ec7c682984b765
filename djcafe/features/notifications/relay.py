"""PostgreSQL LISTEN → Server-Sent Events fan-out.

One ``NotificationRelay`` per channel holds a single dedicated asyncpg
connection running ``LISTEN <channel>`` and an insertion-ordered set of
subscribers (one per open SSE response). Every notification payload is
offered to every subscriber; delivery is best effort.

Failure handling:
- if the LISTEN connection drops or cannot be opened, wait
  ``notify_reconnect_delay_seconds`` and reconnect, forever, until stopped;
- a subscriber that cannot accept a message is collected during the
  broadcast pass and removed after it; its stream then ends so the client
  reconnects with a fresh subscription.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import Any

import asyncpg

from djcafe.core.config import get_settings
from djcafe.core.logging import get_logger
from djcafe.features.notifications.schemas import CAMPAIGN_CHANNEL, PRICE_CHANNEL

logger = get_logger(__name__)

SUBSCRIBER_QUEUE_SIZE = 100

Connector = Callable[[str], Awaitable[Any]]


class SubscriberClosedError(Exception):
    """Raised when a message is offered to a subscriber that can no longer take it."""


def format_sse(payload: str) -> str:
    """Frame a raw payload as one SSE ``data`` event."""
    return f"data: {payload}\n\n"


class Subscriber:
    """Outbound message buffer for one SSE client."""

    def __init__(self, maxsize: int = SUBSCRIBER_QUEUE_SIZE) -> None:
        self.queue: asyncio.Queue[str] = asyncio.Queue(maxsize=maxsize)
        self._closed = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def offer(self, message: str) -> None:
        """Queue a message without waiting.

        Raises:
            SubscriberClosedError: If the client went away or stopped reading.
        """
        if self.closed:
            raise SubscriberClosedError("subscriber closed")
        try:
            self.queue.put_nowait(message)
        except asyncio.QueueFull as e:
            self.close()
            raise SubscriberClosedError("subscriber queue full") from e

    async def next_message(self, timeout: float) -> str | None:
        """Wait for the next message; None when ``timeout`` elapses first.

        Messages queued before the subscriber was closed are still returned.

        Raises:
            SubscriberClosedError: Once closed and drained. A close while
                waiting wakes the caller immediately.
        """
        if not self.queue.empty():
            return self.queue.get_nowait()
        if self.closed:
            raise SubscriberClosedError("subscriber closed")

        getter = asyncio.ensure_future(self.queue.get())
        closer = asyncio.ensure_future(self._closed.wait())
        try:
            done, _pending = await asyncio.wait(
                {getter, closer},
                timeout=timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for task in (getter, closer):
                task.cancel()
            await asyncio.gather(getter, closer, return_exceptions=True)

        if getter in done:
            return getter.result()
        if closer in done:
            raise SubscriberClosedError("subscriber closed")
        return None

    def close(self) -> None:
        """Mark closed; later offers fail and a waiting reader is released."""
        self._closed.set()


class NotificationRelay:
    """Relay notifications from one LISTEN channel to SSE subscribers."""

    def __init__(
        self,
        channel: str,
        dsn: str | None = None,
        reconnect_delay: float | None = None,
        connect: Connector | None = None,
    ) -> None:
        """Initialize relay.

        Args:
            channel: PostgreSQL notification channel.
            dsn: libpq DSN; defaults to the configured database.
            reconnect_delay: Seconds to wait before reconnecting after an error.
            connect: Coroutine opening a connection (asyncpg.connect by default).
        """
        settings = get_settings()
        self.channel = channel
        self._dsn = dsn or settings.listen_dsn
        self._reconnect_delay = (
            settings.notify_reconnect_delay_seconds if reconnect_delay is None else reconnect_delay
        )
        self._connect: Connector = connect or asyncpg.connect
        self._subscribers: dict[Subscriber, None] = {}
        self._connection: Any = None
        self._task: asyncio.Task[None] | None = None
        self._stopping = False
        self.listening = False

    # -------------------------------------------------------------------------
    # Subscribers
    # -------------------------------------------------------------------------

    @property
    def client_count(self) -> int:
        """Number of connected SSE clients."""
        return len(self._subscribers)

    def subscribe(self) -> Subscriber:
        """Register a new SSE client."""
        subscriber = Subscriber()
        self._subscribers[subscriber] = None
        logger.info(
            "notifications.client_connected",
            channel=self.channel,
            clients=self.client_count,
        )
        return subscriber

    def unsubscribe(self, subscriber: Subscriber) -> None:
        """Remove an SSE client; unknown subscribers are ignored."""
        subscriber.close()
        if self._subscribers.pop(subscriber, 0) is None:
            logger.info(
                "notifications.client_disconnected",
                channel=self.channel,
                clients=self.client_count,
            )

    def broadcast(self, payload: str) -> int:
        """Offer a payload to every subscriber in connection order.

        Subscribers that fail are pruned once the pass completes.

        Args:
            payload: Raw notification payload.

        Returns:
            Number of subscribers the message was queued for.
        """
        if not self._subscribers:
            return 0

        message = format_sse(payload)
        dead: list[Subscriber] = []
        delivered = 0

        for subscriber in self._subscribers:
            try:
                subscriber.offer(message)
                delivered += 1
            except SubscriberClosedError:
                dead.append(subscriber)

        for subscriber in dead:
            self._subscribers.pop(subscriber, None)

        if dead:
            logger.info(
                "notifications.dead_clients_pruned",
                channel=self.channel,
                pruned=len(dead),
                clients=self.client_count,
            )
        return delivered

    # -------------------------------------------------------------------------
    # LISTEN connection
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Start listening in the background; no-op when already running."""
        if self._task is not None and not self._task.done():
            return
        self._stopping = False
        self._task = asyncio.create_task(self._run(), name=f"listen:{self.channel}")

    async def stop(self) -> None:
        """Stop listening, close the LISTEN connection and end every client stream."""
        self._stopping = True
        subscribers = list(self._subscribers)
        self._subscribers.clear()
        for subscriber in subscribers:
            subscriber.close()
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self._close_connection()
        self.listening = False
        logger.info(
            "notifications.listener_stopped",
            channel=self.channel,
            clients_closed=len(subscribers),
        )

    async def _run(self) -> None:
        while not self._stopping:
            try:
                await self._listen_once()
            except (OSError, TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
                logger.error(
                    "notifications.listener_error",
                    channel=self.channel,
                    error=str(e),
                    error_type=type(e).__name__,
                )
            finally:
                self.listening = False
                await self._close_connection()

            if self._stopping:
                break
            logger.info(
                "notifications.listener_reconnecting",
                channel=self.channel,
                delay_seconds=self._reconnect_delay,
            )
            await asyncio.sleep(self._reconnect_delay)

    async def _listen_once(self) -> None:
        """Open the connection, LISTEN, and block until it terminates."""
        lost = asyncio.Event()
        connection = await self._connect(self._dsn)
        self._connection = connection
        connection.add_termination_listener(lambda _conn: lost.set())
        await connection.add_listener(self.channel, self._on_notification)

        self.listening = True
        logger.info("notifications.listener_started", channel=self.channel)

        await lost.wait()
        logger.warning("notifications.listener_connection_lost", channel=self.channel)

    def _on_notification(self, _connection: Any, _pid: int, channel: str, payload: str) -> None:
        if channel != self.channel or not payload:
            return
        delivered = self.broadcast(payload)
        logger.debug(
            "notifications.broadcast",
            channel=channel,
            delivered=delivered,
        )

    async def _close_connection(self) -> None:
        connection, self._connection = self._connection, None
        if connection is None or connection.is_closed():
            return
        try:
            await connection.close(timeout=5)
        except (OSError, TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.warning(
                "notifications.listener_close_failed",
                channel=self.channel,
                error=str(e),
            )


@lru_cache
def get_price_relay() -> NotificationRelay:
    """Process-wide relay for price updates."""
    return NotificationRelay(PRICE_CHANNEL)


@lru_cache
def get_campaign_relay() -> NotificationRelay:
    """Process-wide relay for TV campaign events."""
    return NotificationRelay(CAMPAIGN_CHANNEL)
