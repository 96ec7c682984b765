"""NOTIFY side of the notification channel.

Notifications are sent on the caller's session, so PostgreSQL delivers them
only when that transaction commits; a rolled back price change never
reaches the TV.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from djcafe.core.logging import get_logger
from djcafe.features.notifications.schemas import NotificationPayload

logger = get_logger(__name__)


async def publish(db: AsyncSession, channel: str, payload: NotificationPayload | str) -> None:
    """Queue a notification with ``pg_notify``.

    Args:
        db: Database session whose transaction carries the notification.
        channel: Notification channel name.
        payload: Event model (serialized with camelCase keys) or raw JSON text.
    """
    text = payload if isinstance(payload, str) else payload.to_payload()
    await db.execute(select(func.pg_notify(channel, text)))
    logger.info("notifications.published", channel=channel, size=len(text))
