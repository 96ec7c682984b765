"""In-process scheduler for the pricing engine and the campaign processor.

Started from the application lifespan. Two loops run as asyncio tasks:

- prices: one pricing window every N minutes, where N is the
  ``priceUpdateIntervalMinutes`` setting, re-read every
  ``price_interval_reload_minutes``;
- campaigns: one processor tick every ``campaign_poll_seconds``.

Each run uses its own session and commits, which delivers the notifications
the run queued. A failed run is logged and the loop keeps going.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from djcafe.core.config import Settings, get_settings
from djcafe.core.database import get_session_maker
from djcafe.core.logging import get_logger
from djcafe.features.campaigns.service import CampaignService
from djcafe.features.pricing.service import PricingService

logger = get_logger(__name__)


class PriceScheduler:
    """Runs periodic price updates and campaign ticks."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession] | None = None,
        pricing: PricingService | None = None,
        campaigns: CampaignService | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize scheduler.

        Args:
            session_maker: Session factory (application engine by default).
            pricing: Pricing engine.
            campaigns: Campaign processor.
            settings: Application settings.
        """
        self.settings = settings or get_settings()
        self._session_maker = session_maker
        self.pricing = pricing or PricingService()
        self.campaigns = campaigns or CampaignService(pricing=self.pricing)
        self.interval_minutes = self.settings.default_price_update_interval_minutes
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    @property
    def session_maker(self) -> async_sessionmaker[AsyncSession]:
        if self._session_maker is None:
            self._session_maker = get_session_maker()
        return self._session_maker

    async def start(self) -> None:
        """Start both loops; no-op when already running."""
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(self._price_loop(), name="scheduler:prices"),
            asyncio.create_task(self._campaign_loop(), name="scheduler:campaigns"),
        ]
        logger.info(
            "scheduler.started",
            campaign_poll_seconds=self.settings.campaign_poll_seconds,
        )

    async def stop(self) -> None:
        """Cancel both loops and wait for them to exit."""
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if tasks:
            logger.info("scheduler.stopped")

    async def _run(
        self,
        name: str,
        work: Callable[[AsyncSession], Awaitable[object]],
    ) -> bool:
        """Run one unit of work in its own committed session.

        Returns:
            True on success, False if the run failed (already logged).
        """
        async with self.session_maker() as session:
            try:
                await work(session)
                await session.commit()
            except Exception as e:
                await session.rollback()
                logger.error(
                    "scheduler.run_failed",
                    run=name,
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True,
                )
                return False
        return True

    async def run_price_update(self) -> bool:
        """One scheduled pricing window."""
        return await self._run("update_prices", self.pricing.update_all_prices)

    async def run_campaign_tick(self) -> bool:
        """One campaign processor tick."""
        return await self._run("process_campaigns", self.campaigns.process_campaigns)

    async def reload_interval(self) -> int:
        """Re-read the price update interval; keep the current one on failure."""

        async def load(session: AsyncSession) -> None:
            self.interval_minutes = await self.pricing.get_price_update_interval(session)

        previous = self.interval_minutes
        await self._run("reload_interval", load)
        if self.interval_minutes != previous:
            logger.info(
                "scheduler.interval_changed",
                old_minutes=previous,
                new_minutes=self.interval_minutes,
            )
        return self.interval_minutes

    async def _price_loop(self) -> None:
        loop = asyncio.get_running_loop()
        reload_every = self.settings.price_interval_reload_minutes * 60
        await self.reload_interval()
        last_reload = loop.time()

        while True:
            await asyncio.sleep(self.interval_minutes * 60)
            await self.run_price_update()
            if loop.time() - last_reload >= reload_every:
                await self.reload_interval()
                last_reload = loop.time()

    async def _campaign_loop(self) -> None:
        while True:
            await self.run_campaign_tick()
            await asyncio.sleep(self.settings.campaign_poll_seconds)
