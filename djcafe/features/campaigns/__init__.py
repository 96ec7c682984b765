"""TV promotion: promo videos, scheduled video campaigns and quick ads."""

from djcafe.features.campaigns.models import (
    CampaignStatus,
    ImageMode,
    QuickAd,
    Video,
    VideoCampaign,
    VideoStatus,
)
from djcafe.features.campaigns.routes import router
from djcafe.features.campaigns.service import CampaignService, QuickAdService, VideoService

__all__ = [
    "CampaignService",
    "CampaignStatus",
    "ImageMode",
    "QuickAd",
    "QuickAdService",
    "Video",
    "VideoCampaign",
    "VideoService",
    "VideoStatus",
    "router",
]
