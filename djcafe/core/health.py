"""Liveness and readiness endpoints."""

from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from djcafe.core.database import get_db
from djcafe.core.logging import get_logger
from djcafe.features.notifications.relay import get_campaign_relay, get_price_relay

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Service health.

    ``degraded`` means the database answers but something the TV depends on
    (accent-insensitive search, a LISTEN relay) is not available.
    """

    status: Literal["ok", "degraded", "unhealthy"]
    database: Literal["connected", "disconnected"] | None = None
    unaccent: bool | None = None
    listeners: dict[str, bool] | None = None


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness probe; never touches the database."""
    return HealthResponse(status="ok")


@router.get("/health/ready", response_model=HealthResponse)
async def readiness_check(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Database connectivity, the unaccent extension and LISTEN relay state."""
    listeners = {
        relay.channel: relay.listening for relay in (get_price_relay(), get_campaign_relay())
    }
    try:
        result = await db.execute(
            text("SELECT count(*) FROM pg_extension WHERE extname = 'unaccent'")
        )
        unaccent = bool(result.scalar())
    except (OSError, SQLAlchemyError) as e:
        logger.error(
            "health.database_disconnected",
            error=str(e),
            error_type=type(e).__name__,
        )
        return HealthResponse(
            status="unhealthy", database="disconnected", listeners=listeners
        )

    status: Literal["ok", "degraded"] = (
        "ok" if unaccent and all(listeners.values()) else "degraded"
    )
    if status == "degraded":
        logger.warning("health.degraded", unaccent=unaccent, listeners=listeners)
    return HealthResponse(
        status=status, database="connected", unaccent=unaccent, listeners=listeners
    )
