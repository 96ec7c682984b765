"""API routes for videos, video campaigns and quick ads."""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from djcafe.core.database import get_db
from djcafe.features.campaigns.schemas import (
    CampaignCreate,
    CampaignResponse,
    QuickAdCreate,
    QuickAdResponse,
    QuickAdUpdate,
    VideoCreate,
    VideoResponse,
)
from djcafe.features.campaigns.service import CampaignService, QuickAdService, VideoService
from djcafe.features.notifications.schemas import QuickAdPayload
from djcafe.shared.schemas import CountResponse, IdList

router = APIRouter(tags=["campaigns"])


# =============================================================================
# Videos
# =============================================================================


@router.get("/videos", response_model=list[VideoResponse], summary="List promo videos")
async def list_videos(db: AsyncSession = Depends(get_db)) -> list[VideoResponse]:
    """All videos, newest first."""
    return await VideoService().list_videos(db=db)


@router.post(
    "/videos",
    response_model=VideoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a promo video",
)
async def create_video(body: VideoCreate, db: AsyncSession = Depends(get_db)) -> VideoResponse:
    """Register a video file already placed under the media root."""
    return await VideoService().create_video(db=db, data=body)


@router.get("/videos/{video_id}", response_model=VideoResponse, summary="Get a video")
async def get_video(video_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> VideoResponse:
    return await VideoService().get_video(db=db, video_id=video_id)


@router.post(
    "/videos/bulk-delete",
    response_model=CountResponse,
    summary="Delete selected videos",
    description="Deletes the records, their files, and any campaigns using them.",
)
async def delete_videos(body: IdList, db: AsyncSession = Depends(get_db)) -> CountResponse:
    count = await VideoService().delete_videos(db=db, ids=body.ids)
    return CountResponse(count=count)


# =============================================================================
# Campaigns
# =============================================================================


@router.get("/campaigns", response_model=list[CampaignResponse], summary="List campaigns")
async def list_campaigns(db: AsyncSession = Depends(get_db)) -> list[CampaignResponse]:
    """All campaigns, latest scheduled first."""
    return await CampaignService().list_campaigns(db=db)


@router.get(
    "/campaigns/upcoming",
    response_model=list[CampaignResponse],
    summary="List scheduled campaigns",
)
async def list_upcoming_campaigns(db: AsyncSession = Depends(get_db)) -> list[CampaignResponse]:
    """Campaigns still waiting to start, soonest first."""
    return await CampaignService().list_upcoming(db=db)


@router.get(
    "/campaigns/active",
    response_model=CampaignResponse | None,
    summary="Campaign in countdown or playing",
)
async def get_active_campaign(db: AsyncSession = Depends(get_db)) -> CampaignResponse | None:
    """The active campaign, or null when the TV is free."""
    return await CampaignService().get_active(db=db)


@router.post(
    "/campaigns",
    response_model=CampaignResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Schedule a campaign",
)
async def create_campaign(
    body: CampaignCreate,
    db: AsyncSession = Depends(get_db),
) -> CampaignResponse:
    """Schedule a video with a countdown and an optional product highlight."""
    return await CampaignService().create_campaign(db=db, data=body)


@router.post(
    "/campaigns/{campaign_id}/cancel",
    response_model=CampaignResponse,
    summary="Cancel a campaign",
)
async def cancel_campaign(
    campaign_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> CampaignResponse:
    """Cancel a scheduled or running campaign and notify the TV."""
    return await CampaignService().cancel_campaign(db=db, campaign_id=campaign_id)


# =============================================================================
# Quick ads
# =============================================================================


@router.get("/quick-ads", response_model=list[QuickAdResponse], summary="List quick ads")
async def list_quick_ads(db: AsyncSession = Depends(get_db)) -> list[QuickAdResponse]:
    return await QuickAdService().list_quick_ads(db=db)


@router.post(
    "/quick-ads",
    response_model=QuickAdResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a quick ad",
)
async def create_quick_ad(
    body: QuickAdCreate,
    db: AsyncSession = Depends(get_db),
) -> QuickAdResponse:
    """Create a product, text or image ad; images are sent as data URIs."""
    return await QuickAdService().create_quick_ad(db=db, data=body)


@router.put("/quick-ads/{ad_id}", response_model=QuickAdResponse, summary="Update a quick ad")
async def update_quick_ad(
    ad_id: uuid.UUID,
    body: QuickAdUpdate,
    db: AsyncSession = Depends(get_db),
) -> QuickAdResponse:
    return await QuickAdService().update_quick_ad(db=db, ad_id=ad_id, data=body)


@router.delete("/quick-ads/{ad_id}", response_model=QuickAdResponse, summary="Delete a quick ad")
async def delete_quick_ad(ad_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> QuickAdResponse:
    return await QuickAdService().delete_quick_ad(db=db, ad_id=ad_id)


@router.post(
    "/quick-ads/{ad_id}/play",
    response_model=QuickAdPayload,
    summary="Show a quick ad on the TV",
    description="409 while a video campaign is in countdown or playing.",
)
async def play_quick_ad(ad_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> QuickAdPayload:
    """Send the ad to the TV; may also set the product price."""
    return await QuickAdService().play_quick_ad(db=db, ad_id=ad_id)
