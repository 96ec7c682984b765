"""Shared utilities used across 3+ features."""

from djcafe.shared.models import TimestampMixin, UUIDPrimaryKeyMixin
from djcafe.shared.schemas import CountResponse, IdList

__all__ = [
    "CountResponse",
    "IdList",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
]
