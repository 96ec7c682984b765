"""Service layer for TV promotion.

Videos are registered media files. Campaigns schedule a video on the TV and
are advanced by ``CampaignService.process_campaigns``, which the scheduler
calls every few seconds:

    scheduled --(due, no other campaign active)--> countdown --> playing --> completed

Every transition is announced on the ``campaign_update`` channel. Quick ads
are instant overlays sent to the TV on demand.
"""

import uuid
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from djcafe.core.exceptions import BadRequestError, ConflictError, NotFoundError
from djcafe.core.logging import get_logger
from djcafe.features.campaigns.media import MediaError, MediaStorage
from djcafe.features.campaigns.models import (
    ACTIVE_CAMPAIGN_STATUSES,
    CampaignStatus,
    ImageMode,
    QuickAd,
    Video,
    VideoCampaign,
)
from djcafe.features.campaigns.schemas import (
    CampaignCreate,
    CampaignResponse,
    CampaignTickResult,
    QuickAdCreate,
    QuickAdResponse,
    QuickAdUpdate,
    VideoCreate,
    VideoResponse,
)
from djcafe.features.catalog.models import Product
from djcafe.features.notifications.publisher import publish
from djcafe.features.notifications.schemas import (
    CAMPAIGN_CHANNEL,
    PRICE_CHANNEL,
    CampaignEvent,
    CampaignEventType,
    CampaignPayload,
    HighlightPayload,
    PriceUpdateEvent,
    QuickAdPayload,
)
from djcafe.features.pricing.calculator import promotional_price
from djcafe.features.pricing.service import PricingService

logger = get_logger(__name__)

DEFAULT_HIGHLIGHT_SECONDS = 5


def campaign_to_response(campaign: VideoCampaign) -> CampaignResponse:
    """Flatten a campaign with its loaded video and product."""
    video = campaign.video
    product = campaign.product
    return CampaignResponse(
        id=campaign.id,
        video_id=campaign.video_id,
        scheduled_at=campaign.scheduled_at,
        countdown_seconds=campaign.countdown_seconds,
        status=CampaignStatus(campaign.status),
        started_at=campaign.started_at,
        completed_at=campaign.completed_at,
        created_by=campaign.created_by,
        created_at=campaign.created_at,
        video_name=video.name if video else None,
        video_url=video.url if video else None,
        video_thumbnail_url=video.thumbnail_url if video else None,
        video_duration=video.duration if video else None,
        video_aspect_ratio=video.aspect_ratio if video else None,
        product_id=campaign.product_id,
        product_name=product.name if product else None,
        promotional_price=campaign.promotional_price,
        highlight_duration_seconds=campaign.highlight_duration_seconds,
    )


def quick_ad_to_response(ad: QuickAd) -> QuickAdResponse:
    """Flatten a quick ad with its loaded product."""
    product = ad.product
    return QuickAdResponse(
        id=ad.id,
        name=ad.name,
        product_id=ad.product_id,
        promotional_price=ad.promotional_price,
        update_price=ad.update_price,
        display_text=ad.display_text,
        display_price=ad.display_price,
        image_url=ad.image_url,
        image_mode=ad.image_mode,
        duration_seconds=ad.duration_seconds,
        last_played_at=ad.last_played_at,
        created_at=ad.created_at,
        product_name=product.name if product else None,
        current_price=product.current_price if product else None,
        min_price=product.min_price if product else None,
        max_price=product.max_price if product else None,
    )


def campaign_payload(campaign: VideoCampaign, with_countdown: bool = False) -> CampaignPayload:
    """Video details sent with COUNTDOWN_START and VIDEO_PLAY."""
    video = campaign.video
    return CampaignPayload(
        id=campaign.id,
        video_id=campaign.video_id,
        video_url=video.url if video else None,
        video_name=video.name if video else None,
        video_duration=video.duration if video else None,
        countdown_seconds=campaign.countdown_seconds if with_countdown else None,
    )


async def get_active_campaign_model(db: AsyncSession) -> VideoCampaign | None:
    """Campaign currently in countdown or playing, if any."""
    result = await db.execute(
        select(VideoCampaign)
        .options(selectinload(VideoCampaign.video), selectinload(VideoCampaign.product))
        .where(VideoCampaign.status.in_(ACTIVE_CAMPAIGN_STATUSES))
        .limit(1)
    )
    return result.scalar_one_or_none()


# =============================================================================
# Videos
# =============================================================================


class VideoService:
    """Service for promo videos."""

    def __init__(self, storage: MediaStorage | None = None) -> None:
        """Initialize video service.

        Args:
            storage: Media storage (configured media root by default).
        """
        self.storage = storage or MediaStorage()

    async def list_videos(self, db: AsyncSession) -> list[VideoResponse]:
        """All videos, newest first."""
        result = await db.execute(select(Video).order_by(Video.created_at.desc()))
        return [VideoResponse.model_validate(v) for v in result.scalars().all()]

    async def get_video(self, db: AsyncSession, video_id: uuid.UUID) -> VideoResponse:
        """Get one video; 404 if missing."""
        video = await db.get(Video, video_id)
        if video is None:
            raise NotFoundError(
                f"Video not found: {video_id}",
                details={"video_id": str(video_id)},
            )
        return VideoResponse.model_validate(video)

    async def create_video(self, db: AsyncSession, data: VideoCreate) -> VideoResponse:
        """Register a video record."""
        video = Video(
            name=data.name,
            prompt=data.prompt,
            url=data.url,
            thumbnail_url=data.thumbnail_url,
            duration=data.duration,
            aspect_ratio=data.aspect_ratio.value,
            status=data.status.value,
            created_by=data.created_by,
        )
        db.add(video)
        await db.flush()
        await db.refresh(video)

        logger.info("campaigns.video_created", video_id=str(video.id), name=video.name)
        return VideoResponse.model_validate(video)

    async def delete_videos(self, db: AsyncSession, ids: list[uuid.UUID]) -> int:
        """Delete videos and their files; campaigns of those videos cascade.

        Files that are already gone are skipped.
        """
        result = await db.execute(
            delete(Video)
            .where(Video.id.in_(ids))
            .returning(Video.id, Video.url, Video.thumbnail_url)
        )
        deleted = result.all()

        for video_id, url, thumbnail_url in deleted:
            for public_url in (url, thumbnail_url):
                try:
                    self.storage.delete(public_url)
                except (MediaError, OSError) as e:
                    logger.warning(
                        "campaigns.video_file_delete_failed",
                        video_id=str(video_id),
                        url=public_url,
                        error=str(e),
                    )

        logger.info("campaigns.videos_deleted", requested=len(ids), deleted=len(deleted))
        return len(deleted)


# =============================================================================
# Campaigns
# =============================================================================


class CampaignService:
    """Service for scheduled video campaigns and their processor."""

    def __init__(self, pricing: PricingService | None = None) -> None:
        """Initialize campaign service.

        Args:
            pricing: Pricing service used to apply highlight prices.
        """
        self.pricing = pricing or PricingService()

    def _query(self):  # type: ignore[no-untyped-def]
        return select(VideoCampaign).options(
            selectinload(VideoCampaign.video), selectinload(VideoCampaign.product)
        )

    async def list_campaigns(self, db: AsyncSession) -> list[CampaignResponse]:
        """All campaigns, latest scheduled first."""
        result = await db.execute(self._query().order_by(VideoCampaign.scheduled_at.desc()))
        return [campaign_to_response(c) for c in result.scalars().all()]

    async def list_upcoming(self, db: AsyncSession) -> list[CampaignResponse]:
        """Scheduled campaigns, soonest first."""
        result = await db.execute(
            self._query()
            .where(VideoCampaign.status == CampaignStatus.SCHEDULED.value)
            .order_by(VideoCampaign.scheduled_at)
        )
        return [campaign_to_response(c) for c in result.scalars().all()]

    async def get_active(self, db: AsyncSession) -> CampaignResponse | None:
        """Campaign in countdown or playing, or None."""
        campaign = await get_active_campaign_model(db)
        return campaign_to_response(campaign) if campaign else None

    async def create_campaign(self, db: AsyncSession, data: CampaignCreate) -> CampaignResponse:
        """Schedule a campaign.

        Raises:
            NotFoundError: If the video or highlighted product does not exist.
        """
        if await db.get(Video, data.video_id) is None:
            raise NotFoundError(
                f"Video not found: {data.video_id}",
                details={"video_id": str(data.video_id)},
            )
        if data.product_id is not None and await db.get(Product, data.product_id) is None:
            raise NotFoundError(
                f"Product not found: {data.product_id}",
                details={"product_id": str(data.product_id)},
            )

        campaign = VideoCampaign(
            video_id=data.video_id,
            scheduled_at=data.scheduled_at,
            countdown_seconds=data.countdown_seconds,
            status=CampaignStatus.SCHEDULED.value,
            product_id=data.product_id,
            promotional_price=data.promotional_price,
            highlight_duration_seconds=data.highlight_duration_seconds,
            created_by=data.created_by,
        )
        db.add(campaign)
        await db.flush()

        logger.info(
            "campaigns.campaign_created",
            campaign_id=str(campaign.id),
            scheduled_at=data.scheduled_at.isoformat(),
            countdown_seconds=data.countdown_seconds,
        )
        return await self._reload(db, campaign.id)

    async def cancel_campaign(self, db: AsyncSession, campaign_id: uuid.UUID) -> CampaignResponse:
        """Cancel a campaign and tell the TV to drop it.

        Raises:
            NotFoundError: If the campaign does not exist.
            ConflictError: If it already completed or was cancelled.
        """
        campaign = await db.get(VideoCampaign, campaign_id)
        if campaign is None:
            raise NotFoundError(
                f"Campaign not found: {campaign_id}",
                details={"campaign_id": str(campaign_id)},
            )
        if campaign.status in (CampaignStatus.COMPLETED.value, CampaignStatus.CANCELLED.value):
            raise ConflictError(
                f"Cannot cancel campaign in status '{campaign.status}'",
                details={"campaign_id": str(campaign_id), "status": campaign.status},
            )

        campaign.status = CampaignStatus.CANCELLED.value
        await db.flush()
        await publish(
            db,
            CAMPAIGN_CHANNEL,
            CampaignEvent(
                type=CampaignEventType.CANCELLED,
                campaign=CampaignPayload(id=campaign.id, video_id=campaign.video_id),
            ),
        )

        logger.info("campaigns.campaign_cancelled", campaign_id=str(campaign_id))
        return await self._reload(db, campaign_id)

    async def _reload(self, db: AsyncSession, campaign_id: uuid.UUID) -> CampaignResponse:
        result = await db.execute(
            self._query()
            .where(VideoCampaign.id == campaign_id)
            .execution_options(populate_existing=True)
        )
        return campaign_to_response(result.scalar_one())

    async def process_campaigns(
        self,
        db: AsyncSession,
        now: datetime | None = None,
    ) -> CampaignTickResult:
        """Advance campaigns whose next step is due.

        1. If nothing is in countdown or playing, start the earliest due
           scheduled campaign (straight to playing when its countdown is 0).
        2. Countdown campaigns whose countdown elapsed start playing.
        3. Playing campaigns whose video ended complete; a product highlight
           applies the promotional price first.

        Args:
            db: Database session.
            now: Tick time (defaults to the current UTC time).

        Returns:
            IDs of campaigns moved in each step.
        """
        now = now or datetime.now(UTC)
        tick = CampaignTickResult()

        if await get_active_campaign_model(db) is None:
            result = await db.execute(
                self._query()
                .where(
                    VideoCampaign.status == CampaignStatus.SCHEDULED.value,
                    VideoCampaign.scheduled_at <= now,
                )
                .order_by(VideoCampaign.scheduled_at)
                .limit(1)
            )
            due = result.scalar_one_or_none()
            if due is not None:
                await self._start(db, due, now)
                tick.started.append(due.id)

        result = await db.execute(
            self._query().where(VideoCampaign.status == CampaignStatus.COUNTDOWN.value)
        )
        for campaign in result.scalars().all():
            if campaign.started_at is None:
                continue
            if now >= campaign.started_at + timedelta(seconds=campaign.countdown_seconds):
                await self._play(db, campaign)
                tick.playing.append(campaign.id)

        result = await db.execute(
            self._query().where(VideoCampaign.status == CampaignStatus.PLAYING.value)
        )
        for campaign in result.scalars().all():
            if campaign.started_at is None or campaign.video is None:
                continue
            video_end = campaign.started_at + timedelta(
                seconds=campaign.countdown_seconds + campaign.video.duration
            )
            if now >= video_end:
                await self._complete(db, campaign, now)
                tick.completed.append(campaign.id)

        await db.flush()
        return tick

    async def _start(self, db: AsyncSession, campaign: VideoCampaign, now: datetime) -> None:
        campaign.started_at = now
        if campaign.countdown_seconds == 0:
            campaign.status = CampaignStatus.PLAYING.value
            event = CampaignEvent(
                type=CampaignEventType.VIDEO_PLAY, campaign=campaign_payload(campaign)
            )
            logger.info("campaigns.campaign_playing", campaign_id=str(campaign.id), countdown=0)
        else:
            campaign.status = CampaignStatus.COUNTDOWN.value
            event = CampaignEvent(
                type=CampaignEventType.COUNTDOWN_START,
                campaign=campaign_payload(campaign, with_countdown=True),
            )
            logger.info(
                "campaigns.countdown_started",
                campaign_id=str(campaign.id),
                countdown_seconds=campaign.countdown_seconds,
            )
        await db.flush()
        await publish(db, CAMPAIGN_CHANNEL, event)

    async def _play(self, db: AsyncSession, campaign: VideoCampaign) -> None:
        campaign.status = CampaignStatus.PLAYING.value
        await db.flush()
        await publish(
            db,
            CAMPAIGN_CHANNEL,
            CampaignEvent(type=CampaignEventType.VIDEO_PLAY, campaign=campaign_payload(campaign)),
        )
        logger.info("campaigns.campaign_playing", campaign_id=str(campaign.id))

    async def _complete(self, db: AsyncSession, campaign: VideoCampaign, now: datetime) -> None:
        highlight = None
        product = campaign.product
        if product is not None and campaign.promotional_price is not None:
            new_price, old_price = await self.pricing.apply_promotional_price(
                db, product, campaign.promotional_price, now
            )
            highlight = HighlightPayload(
                product_id=product.id,
                product_name=product.name,
                new_price=new_price,
                old_price=old_price,
                duration_seconds=campaign.highlight_duration_seconds or DEFAULT_HIGHLIGHT_SECONDS,
            )
            await publish(db, PRICE_CHANNEL, PriceUpdateEvent(count=1, timestamp=now))

        campaign.status = CampaignStatus.COMPLETED.value
        campaign.completed_at = now
        await db.flush()
        await publish(
            db,
            CAMPAIGN_CHANNEL,
            CampaignEvent(
                type=CampaignEventType.VIDEO_END,
                campaign=CampaignPayload(
                    id=campaign.id, video_id=campaign.video_id, highlight=highlight
                ),
            ),
        )
        logger.info(
            "campaigns.campaign_completed",
            campaign_id=str(campaign.id),
            highlighted=highlight is not None,
        )


# =============================================================================
# Quick ads
# =============================================================================


class QuickAdService:
    """Service for quick ads (instant TV overlays)."""

    def __init__(
        self,
        storage: MediaStorage | None = None,
        pricing: PricingService | None = None,
    ) -> None:
        """Initialize quick ad service.

        Args:
            storage: Media storage for ad images.
            pricing: Pricing service used when an ad updates the product price.
        """
        self.storage = storage or MediaStorage()
        self.pricing = pricing or PricingService()

    async def _get_model(self, db: AsyncSession, ad_id: uuid.UUID) -> QuickAd:
        result = await db.execute(
            select(QuickAd)
            .options(selectinload(QuickAd.product))
            .where(QuickAd.id == ad_id)
            .execution_options(populate_existing=True)
        )
        ad = result.scalar_one_or_none()
        if ad is None:
            raise NotFoundError(
                f"Quick ad not found: {ad_id}",
                details={"quick_ad_id": str(ad_id)},
            )
        return ad

    def _save_image(self, ad_id: uuid.UUID, data_uri: str) -> str:
        try:
            return self.storage.save_ad_image(str(ad_id), data_uri)
        except MediaError as e:
            raise BadRequestError(str(e)) from e

    async def list_quick_ads(self, db: AsyncSession) -> list[QuickAdResponse]:
        """All quick ads, most recently edited first."""
        result = await db.execute(
            select(QuickAd)
            .options(selectinload(QuickAd.product))
            .order_by(QuickAd.updated_at.desc())
        )
        return [quick_ad_to_response(ad) for ad in result.scalars().all()]

    async def create_quick_ad(self, db: AsyncSession, data: QuickAdCreate) -> QuickAdResponse:
        """Create a quick ad, writing its image (if any) under the media root."""
        ad_id = uuid.uuid4()
        image_url = self._save_image(ad_id, data.image_base64) if data.image_base64 else None

        ad = QuickAd(
            id=ad_id,
            name=data.name,
            product_id=data.product_id,
            promotional_price=data.promotional_price,
            update_price=data.update_price,
            display_text=data.display_text,
            display_price=data.display_price,
            image_url=image_url,
            image_mode=(data.image_mode or ImageMode.BACKGROUND).value if image_url else None,
            duration_seconds=data.duration_seconds,
            created_by=data.created_by,
        )
        db.add(ad)
        await db.flush()

        logger.info("campaigns.quick_ad_created", quick_ad_id=str(ad_id), has_image=bool(image_url))
        return quick_ad_to_response(await self._get_model(db, ad_id))

    async def update_quick_ad(
        self,
        db: AsyncSession,
        ad_id: uuid.UUID,
        data: QuickAdUpdate,
    ) -> QuickAdResponse:
        """Update a quick ad; the image is replaced, removed or kept."""
        ad = await self._get_model(db, ad_id)

        if data.remove_image:
            self.storage.delete(ad.image_url)
            ad.image_url = None
            ad.image_mode = None
        elif data.image_base64:
            ad.image_url = self._save_image(ad_id, data.image_base64)
            ad.image_mode = (data.image_mode or ImageMode.BACKGROUND).value
        elif data.image_mode is not None and ad.image_url:
            ad.image_mode = data.image_mode.value

        ad.name = data.name
        ad.product_id = data.product_id
        ad.promotional_price = data.promotional_price
        ad.update_price = data.update_price
        ad.display_text = data.display_text
        ad.display_price = data.display_price
        ad.duration_seconds = data.duration_seconds
        await db.flush()

        logger.info("campaigns.quick_ad_updated", quick_ad_id=str(ad_id))
        return quick_ad_to_response(await self._get_model(db, ad_id))

    async def delete_quick_ad(self, db: AsyncSession, ad_id: uuid.UUID) -> QuickAdResponse:
        """Delete a quick ad and its image."""
        ad = await self._get_model(db, ad_id)
        deleted = quick_ad_to_response(ad)
        self.storage.delete(ad.image_url)
        await db.delete(ad)
        await db.flush()

        logger.info("campaigns.quick_ad_deleted", quick_ad_id=str(ad_id))
        return deleted

    async def play_quick_ad(
        self,
        db: AsyncSession,
        ad_id: uuid.UUID,
        now: datetime | None = None,
    ) -> QuickAdPayload:
        """Send a quick ad to the TV.

        Product ads show the product name and the promotional price clamped
        to the product bounds; with ``update_price`` the product price is
        changed too. Free-text ads show their text and price label.

        Raises:
            ConflictError: If a video campaign is in countdown or playing.
            NotFoundError: If the quick ad does not exist.
        """
        if await get_active_campaign_model(db) is not None:
            raise ConflictError("A campaign is currently active; wait for it to finish")

        ad = await self._get_model(db, ad_id)
        now = now or datetime.now(UTC)
        product = ad.product
        old_price: Decimal | None = None

        if product is not None and ad.promotional_price is not None:
            display_text = product.name
            old_price = Decimal(product.current_price)
            if ad.update_price:
                new_price, old_price = await self.pricing.apply_promotional_price(
                    db, product, ad.promotional_price, now
                )
                await publish(db, PRICE_CHANNEL, PriceUpdateEvent(count=1, timestamp=now))
            else:
                new_price = promotional_price(
                    ad.promotional_price, product.min_price, product.max_price
                )
            price: str | None = f"{new_price:.2f}"
        else:
            display_text = ad.display_text or ad.name
            price = ad.display_price

        payload = QuickAdPayload(
            id=ad.id,
            display_text=display_text,
            price=price,
            old_price=f"{old_price:.2f}" if old_price is not None else None,
            image_url=ad.image_url,
            image_mode=ad.image_mode,
            duration_seconds=ad.duration_seconds,
        )
        await publish(
            db,
            CAMPAIGN_CHANNEL,
            CampaignEvent(type=CampaignEventType.QUICK_AD_PLAY, quick_ad=payload, timestamp=now),
        )

        ad.last_played_at = now
        await db.flush()

        logger.info(
            "campaigns.quick_ad_played",
            quick_ad_id=str(ad_id),
            price_updated=bool(product is not None and ad.update_price),
        )
        return payload
