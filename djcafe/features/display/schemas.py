"""Response schemas for the TV display."""

import uuid
from decimal import Decimal

from pydantic import BaseModel, Field

from djcafe.features.campaigns.schemas import CampaignResponse, QuickAdResponse
from djcafe.features.catalog.models import Trend
from djcafe.features.display.sequencer import OverlayKind


class DisplayProduct(BaseModel):
    """One row of the TV price board."""

    id: uuid.UUID
    name: str
    category_name: str | None = None
    current_price: Decimal
    trend: Trend


class DisplayCategory(BaseModel):
    """Products of one category, by name."""

    name: str
    products: list[DisplayProduct]


class DisplayProductsResponse(BaseModel):
    """Price board: categories sorted by name."""

    categories: list[DisplayCategory]
    total: int = Field(..., ge=0)


class DisplayState(BaseModel):
    """What the TV should show right now (polling fallback for SSE)."""

    overlay: OverlayKind
    remaining_seconds: int = Field(0, ge=0)
    countdown_label: str | None = Field(None, description="MM:SS during a countdown")
    campaign: CampaignResponse | None = None
    quick_ad: QuickAdResponse | None = None
