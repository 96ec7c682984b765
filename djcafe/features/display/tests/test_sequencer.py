"""Tests for TV overlay sequencing."""

import uuid
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from djcafe.features.display.sequencer import (
    IDLE,
    Overlay,
    OverlayKind,
    format_countdown,
    quick_ad_remaining,
    resolve_overlay,
)

STARTED = datetime(2026, 10, 19, 22, 0, tzinfo=UTC)


def campaign(**overrides):
    fields = {
        "status": "countdown",
        "started_at": STARTED,
        "countdown_seconds": 30,
        "video_duration": 20,
        "product_id": uuid.uuid4(),
        "promotional_price": Decimal("150"),
        "highlight_duration_seconds": 5,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


def at(seconds: float) -> datetime:
    return STARTED + timedelta(seconds=seconds)


class TestFormatCountdown:
    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [(0, "00:00"), (9, "00:09"), (60, "01:00"), (299, "04:59"), (-5, "00:00")],
    )
    def test_format(self, seconds, expected):
        assert format_countdown(seconds) == expected


class TestResolveOverlay:
    def test_no_campaign(self):
        assert resolve_overlay(None, STARTED) is IDLE

    @pytest.mark.parametrize("status", ["scheduled", "cancelled"])
    def test_not_running(self, status):
        assert resolve_overlay(campaign(status=status), at(1)) is IDLE

    def test_not_started(self):
        assert resolve_overlay(campaign(started_at=None), at(1)) is IDLE

    def test_before_start(self):
        assert resolve_overlay(campaign(), at(-1)) is IDLE

    def test_countdown_phase(self):
        overlay = resolve_overlay(campaign(), at(0.5))
        assert overlay == Overlay(OverlayKind.COUNTDOWN, 30)
        assert overlay.label == "00:30"

    def test_countdown_last_second(self):
        assert resolve_overlay(campaign(), at(29.9)) == Overlay(OverlayKind.COUNTDOWN, 1)

    def test_video_phase(self):
        overlay = resolve_overlay(campaign(status="playing"), at(30))
        assert overlay == Overlay(OverlayKind.VIDEO, 20)
        assert overlay.label is None

    def test_zero_countdown_goes_straight_to_video(self):
        overlay = resolve_overlay(campaign(status="playing", countdown_seconds=0), at(0))
        assert overlay.kind is OverlayKind.VIDEO

    def test_highlight_phase(self):
        overlay = resolve_overlay(campaign(status="completed"), at(52))
        assert overlay == Overlay(OverlayKind.HIGHLIGHT, 3)

    def test_idle_after_highlight(self):
        assert resolve_overlay(campaign(status="completed"), at(55)) is IDLE

    def test_no_highlight_without_product(self):
        overlay = resolve_overlay(campaign(status="completed", product_id=None), at(51))
        assert overlay is IDLE

    def test_no_highlight_without_price(self):
        overlay = resolve_overlay(campaign(status="completed", promotional_price=None), at(51))
        assert overlay is IDLE


class TestQuickAdRemaining:
    def test_never_played(self):
        assert quick_ad_remaining(None, 10, STARTED) == 0

    def test_on_screen(self):
        assert quick_ad_remaining(STARTED, 10, at(3.5)) == 7

    def test_over(self):
        assert quick_ad_remaining(STARTED, 10, at(10)) == 0
