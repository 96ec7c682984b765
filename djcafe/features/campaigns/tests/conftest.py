"""Test fixtures for campaigns module."""

import uuid
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from djcafe.features.campaigns.media import MediaStorage
from djcafe.features.campaigns.models import CampaignStatus, QuickAd, Video, VideoCampaign
from djcafe.features.catalog.models import Product, ProductStatus, Trend

NOW = datetime(2026, 10, 19, 22, 0, tzinfo=UTC)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def db():
    """Mocked AsyncSession with synchronous add()."""
    session = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def one():
    """Build a mocked Result for scalar_one_or_none()/scalar_one()."""

    def make(value):
        result = MagicMock()
        result.scalar_one_or_none.return_value = value
        result.scalar_one.return_value = value
        return result

    return make


@pytest.fixture
def many():
    """Build a mocked Result whose scalars().all() returns rows."""

    def make(rows):
        result = MagicMock()
        result.scalars.return_value.all.return_value = rows
        return result

    return make


@pytest.fixture
def mock_publish():
    with patch("djcafe.features.campaigns.service.publish", new_callable=AsyncMock) as mocked:
        yield mocked


@pytest.fixture
def pricing():
    """Pricing service stub applying 150.00 over 200.00."""
    service = MagicMock()
    service.apply_promotional_price = AsyncMock(
        return_value=(Decimal("150.00"), Decimal("200.00"))
    )
    return service


@pytest.fixture
def storage(tmp_path):
    return MediaStorage(tmp_path)


@pytest.fixture
def make_product():
    def make(**overrides):
        fields = {
            "id": uuid.uuid4(),
            "name": "Espresso",
            "category_id": uuid.uuid4(),
            "base_price": Decimal("200"),
            "min_price": Decimal("120"),
            "max_price": Decimal("300"),
            "current_price": Decimal("200"),
            "previous_price": Decimal("200"),
            "trend": Trend.DOWN.value,
            "status": ProductStatus.ACTIVE.value,
        }
        fields.update(overrides)
        return Product(**fields)

    return make


@pytest.fixture
def make_video():
    def make(**overrides):
        fields = {
            "id": uuid.uuid4(),
            "name": "Friday promo",
            "prompt": "",
            "url": "/videos/friday.mp4",
            "thumbnail_url": "/videos/friday.jpg",
            "duration": 20,
            "aspect_ratio": "landscape",
            "status": "ready",
            "created_at": NOW,
            "updated_at": NOW,
        }
        fields.update(overrides)
        return Video(**fields)

    return make


@pytest.fixture
def make_campaign(make_video):
    """Factory for campaigns with a loaded 20 second video."""

    def make(product=None, **overrides):
        video = overrides.pop("video", None) or make_video()
        fields = {
            "id": uuid.uuid4(),
            "video_id": video.id,
            "video": video,
            "scheduled_at": NOW,
            "countdown_seconds": 30,
            "status": CampaignStatus.SCHEDULED.value,
            "started_at": None,
            "completed_at": None,
            "product_id": product.id if product else None,
            "product": product,
            "promotional_price": None,
            "highlight_duration_seconds": 5,
            "created_at": NOW,
            "updated_at": NOW,
        }
        fields.update(overrides)
        return VideoCampaign(**fields)

    return make


@pytest.fixture
def make_quick_ad():
    def make(product=None, **overrides):
        fields = {
            "id": uuid.uuid4(),
            "name": "Happy hour",
            "product_id": product.id if product else None,
            "product": product,
            "promotional_price": None,
            "update_price": False,
            "display_text": None,
            "display_price": None,
            "image_url": None,
            "image_mode": None,
            "duration_seconds": 10,
            "last_played_at": None,
            "created_at": NOW,
            "updated_at": NOW,
        }
        fields.update(overrides)
        return QuickAd(**fields)

    return make
