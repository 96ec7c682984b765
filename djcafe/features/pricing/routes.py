"""API routes for the pricing admin page."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from djcafe.core.database import get_db
from djcafe.features.pricing.schemas import (
    BulkPriceUpdateRequest,
    PriceHistoryPoint,
    PriceUpdateInterval,
    PriceUpdateResult,
    PricingConfigUpdate,
    PricingCountResponse,
    PricingStatusItem,
)
from djcafe.features.pricing.service import PricingService

router = APIRouter(prefix="/pricing", tags=["pricing"])


@router.get(
    "/status",
    response_model=list[PricingStatusItem],
    summary="Pricing status of active products",
)
async def get_pricing_status(db: AsyncSession = Depends(get_db)) -> list[PricingStatusItem]:
    """Active products with prices, sales counters, mode and percentages."""
    return await PricingService().get_pricing_status(db)


@router.post(
    "/update-now",
    response_model=PriceUpdateResult,
    summary="Change prices now",
    description="""
Run one pricing window immediately, the same as the scheduled job.
Connected TV displays are notified over `/events/prices` when any price changed.
""",
)
async def update_prices_now(db: AsyncSession = Depends(get_db)) -> PriceUpdateResult:
    """Trigger a manual price update."""
    return await PricingService().update_all_prices(db, manual=True)


@router.put(
    "/products",
    response_model=PricingCountResponse,
    summary="Save edited pricing rows",
)
async def bulk_update_prices(
    body: BulkPriceUpdateRequest,
    db: AsyncSession = Depends(get_db),
) -> PricingCountResponse:
    """Update base/min/max prices and total sales of several products."""
    count = await PricingService().bulk_update_prices(db, body.updates)
    return PricingCountResponse(count=count)


@router.put(
    "/config",
    response_model=PricingCountResponse,
    summary="Update global pricing configuration",
)
async def update_pricing_config(
    config: PricingConfigUpdate,
    db: AsyncSession = Depends(get_db),
) -> PricingCountResponse:
    """Apply mode and percentages to all active products."""
    count = await PricingService().update_pricing_config(db, config)
    return PricingCountResponse(count=count)


@router.post(
    "/reset-session",
    response_model=PricingCountResponse,
    summary="Restart the sales counting window",
)
async def reset_session_quantities(db: AsyncSession = Depends(get_db)) -> PricingCountResponse:
    """Set last_price_update to now on active products."""
    count = await PricingService().reset_session_quantities(db)
    return PricingCountResponse(count=count)


@router.post(
    "/sync-sales",
    response_model=PricingCountResponse,
    summary="Recount sales from table orders",
)
async def sync_sales_count(db: AsyncSession = Depends(get_db)) -> PricingCountResponse:
    """Recompute every product's sales count from table orders."""
    count = await PricingService().sync_sales_count(db)
    return PricingCountResponse(count=count)


@router.get(
    "/history/{product_id}",
    response_model=list[PriceHistoryPoint],
    summary="Price history of a product",
)
async def get_price_history(
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    limit: int | None = Query(None, ge=1, le=500, description="Number of changes (default 10)"),
) -> list[PriceHistoryPoint]:
    """Latest price changes in chronological order."""
    return await PricingService().get_price_history(db, product_id, limit)


@router.get(
    "/interval",
    response_model=PriceUpdateInterval,
    summary="Get price update interval",
)
async def get_price_update_interval(db: AsyncSession = Depends(get_db)) -> PriceUpdateInterval:
    """Minutes between scheduled price updates."""
    minutes = await PricingService().get_price_update_interval(db)
    return PriceUpdateInterval(minutes=minutes)


@router.put(
    "/interval",
    response_model=PriceUpdateInterval,
    summary="Set price update interval",
    description="Valid range is 1-60 minutes. The scheduler picks up the new value on its next reload.",
)
async def set_price_update_interval(
    body: PriceUpdateInterval,
    db: AsyncSession = Depends(get_db),
) -> PriceUpdateInterval:
    """Store the price update interval."""
    minutes = await PricingService().set_price_update_interval(db, body.minutes)
    return PriceUpdateInterval(minutes=minutes)
