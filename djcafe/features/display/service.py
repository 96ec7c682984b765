"""Read-only queries backing the TV display."""

from collections import defaultdict
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from djcafe.core.logging import get_logger
from djcafe.features.campaigns.models import CampaignStatus, QuickAd, VideoCampaign
from djcafe.features.campaigns.service import (
    campaign_to_response,
    get_active_campaign_model,
    quick_ad_to_response,
)
from djcafe.features.catalog.models import Category, Product, ProductStatus
from djcafe.features.display.schemas import (
    DisplayCategory,
    DisplayProduct,
    DisplayProductsResponse,
    DisplayState,
)
from djcafe.features.display.sequencer import (
    OverlayKind,
    quick_ad_remaining,
    resolve_overlay,
)

logger = get_logger(__name__)

UNCATEGORIZED = "Ostalo"


def group_by_category(products: list[DisplayProduct]) -> list[DisplayCategory]:
    """Group board rows by category name, categories sorted by name.

    Products without a category land in "Ostalo". Row order within a
    category is preserved.
    """
    grouped: dict[str, list[DisplayProduct]] = defaultdict(list)
    for product in products:
        grouped[product.category_name or UNCATEGORIZED].append(product)
    return [DisplayCategory(name=name, products=grouped[name]) for name in sorted(grouped)]


class DisplayService:
    """Service for the TV price board and overlay state."""

    async def get_products(self, db: AsyncSession) -> DisplayProductsResponse:
        """Active products with category and trend, grouped for the board."""
        result = await db.execute(
            select(
                Product.id,
                Product.name,
                Category.name.label("category_name"),
                Product.current_price,
                Product.trend,
            )
            .outerjoin(Category, Product.category_id == Category.id)
            .where(Product.status == ProductStatus.ACTIVE.value)
            .order_by(Product.name)
        )
        rows = [DisplayProduct.model_validate(row, from_attributes=True) for row in result.all()]
        return DisplayProductsResponse(categories=group_by_category(rows), total=len(rows))

    async def get_state(self, db: AsyncSession, now: datetime | None = None) -> DisplayState:
        """Current overlay.

        Priority: the active campaign, then the highlight of the most
        recently completed campaign, then a quick ad still on screen.
        """
        now = now or datetime.now(UTC)

        active = await get_active_campaign_model(db)
        if active is not None:
            campaign = campaign_to_response(active)
            overlay = resolve_overlay(campaign, now)
            if overlay.kind is not OverlayKind.IDLE:
                return DisplayState(
                    overlay=overlay.kind,
                    remaining_seconds=overlay.remaining_seconds,
                    countdown_label=overlay.label,
                    campaign=campaign,
                )

        result = await db.execute(
            select(VideoCampaign)
            .options(selectinload(VideoCampaign.video), selectinload(VideoCampaign.product))
            .where(VideoCampaign.status == CampaignStatus.COMPLETED.value)
            .order_by(VideoCampaign.completed_at.desc())
            .limit(1)
        )
        last = result.scalar_one_or_none()
        if last is not None:
            campaign = campaign_to_response(last)
            overlay = resolve_overlay(campaign, now)
            if overlay.kind is OverlayKind.HIGHLIGHT:
                return DisplayState(
                    overlay=overlay.kind,
                    remaining_seconds=overlay.remaining_seconds,
                    campaign=campaign,
                )

        result = await db.execute(
            select(QuickAd)
            .options(selectinload(QuickAd.product))
            .where(QuickAd.last_played_at.is_not(None))
            .order_by(QuickAd.last_played_at.desc())
            .limit(1)
        )
        ad = result.scalar_one_or_none()
        if ad is not None:
            remaining = quick_ad_remaining(ad.last_played_at, ad.duration_seconds, now)
            if remaining > 0:
                return DisplayState(
                    overlay=OverlayKind.QUICK_AD,
                    remaining_seconds=remaining,
                    quick_ad=quick_ad_to_response(ad),
                )

        return DisplayState(overlay=OverlayKind.IDLE)
