"""Tests for the in-process price and campaign scheduler."""

import asyncio
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest

from djcafe.core.config import Settings
from djcafe.features.jobs.scheduler import PriceScheduler


@pytest.fixture
def session():
    return AsyncMock()


@pytest.fixture
def session_maker(session):
    @asynccontextmanager
    async def make():
        yield session

    return make


@pytest.fixture
def scheduler(session_maker, pricing, campaigns):
    pricing.get_price_update_interval = AsyncMock(return_value=5)
    return PriceScheduler(
        session_maker=session_maker,
        pricing=pricing,
        campaigns=campaigns,
        settings=Settings(campaign_poll_seconds=1),
    )


class TestRuns:
    @pytest.mark.asyncio
    async def test_price_update_commits(self, scheduler, session, pricing):
        assert await scheduler.run_price_update() is True
        pricing.update_all_prices.assert_awaited_once_with(session)
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_run_rolls_back(self, scheduler, session, campaigns):
        campaigns.process_campaigns.side_effect = RuntimeError("connection reset")

        assert await scheduler.run_campaign_tick() is False
        session.rollback.assert_awaited_once()
        session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reload_interval(self, scheduler, pricing):
        assert scheduler.interval_minutes == 1
        assert await scheduler.reload_interval() == 5
        assert scheduler.interval_minutes == 5

    @pytest.mark.asyncio
    async def test_reload_failure_keeps_interval(self, scheduler, pricing):
        pricing.get_price_update_interval.side_effect = RuntimeError("db down")
        assert await scheduler.reload_interval() == 1


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_start_runs_campaign_tick_and_stop_cancels(self, scheduler, campaigns):
        await scheduler.start()
        for _ in range(10):
            await asyncio.sleep(0)

        assert scheduler.running is True
        campaigns.process_campaigns.assert_awaited()

        await scheduler.stop()
        assert scheduler.running is False

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, scheduler):
        await scheduler.start()
        tasks = list(scheduler._tasks)
        await scheduler.start()

        assert scheduler._tasks == tasks
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_stop_when_not_started(self, scheduler):
        await scheduler.stop()
        assert scheduler.running is False
