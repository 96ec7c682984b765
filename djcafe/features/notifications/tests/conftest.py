"""Fixtures for notification tests."""

import pytest

from djcafe.features.notifications.relay import NotificationRelay


class FakeConnection:
    """Stand-in for an asyncpg connection used by the LISTEN loop."""

    def __init__(self) -> None:
        self.listeners: dict = {}
        self.closed = False
        self._on_terminate = None

    def add_termination_listener(self, callback) -> None:
        self._on_terminate = callback

    async def add_listener(self, channel, callback) -> None:
        self.listeners[channel] = callback

    def is_closed(self) -> bool:
        return self.closed

    async def close(self, timeout=None) -> None:
        self.closed = True

    def notify(self, channel: str, payload: str) -> None:
        self.listeners[channel](self, 4242, channel, payload)

    def terminate(self) -> None:
        self.closed = True
        self._on_terminate(self)


@pytest.fixture
def make_connection():
    return FakeConnection


@pytest.fixture
def fake_connection():
    return FakeConnection()


@pytest.fixture
def relay():
    """Relay on the price channel that never opens a real connection."""
    return NotificationRelay(
        "price_update",
        dsn="postgresql://test@localhost/test",
        reconnect_delay=0,
    )
