"""Key/value application settings editable from the admin UI."""

from __future__ import annotations

from typing import Any

from sqlalchemy import String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from djcafe.core.database import Base
from djcafe.shared.models import TimestampMixin, UUIDPrimaryKeyMixin

PRICE_UPDATE_INTERVAL_KEY = "priceUpdateIntervalMinutes"


class AppSetting(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """One named setting; ``value`` holds a small JSON object.

    Known keys:
        priceUpdateIntervalMinutes: ``{"minutes": n}``, read by the price scheduler.
    """

    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    value: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)
