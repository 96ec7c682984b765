"""API routes for the TV display."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from djcafe.core.database import get_db
from djcafe.features.display.schemas import DisplayProductsResponse, DisplayState
from djcafe.features.display.service import DisplayService

router = APIRouter(prefix="/display", tags=["display"])


@router.get(
    "/products",
    response_model=DisplayProductsResponse,
    summary="TV price board",
    description="Active products grouped by category; refetch on each `price_update` event.",
)
async def get_display_products(db: AsyncSession = Depends(get_db)) -> DisplayProductsResponse:
    return await DisplayService().get_products(db=db)


@router.get(
    "/state",
    response_model=DisplayState,
    summary="Current TV overlay",
    description="Polling fallback for clients that lost the campaign event stream.",
)
async def get_display_state(db: AsyncSession = Depends(get_db)) -> DisplayState:
    """Countdown, video, highlight, quick ad, or idle, with seconds remaining."""
    return await DisplayService().get_state(db=db)
