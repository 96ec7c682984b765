"""Core infrastructure: config, database, logging, middleware, exceptions."""

from djcafe.core.config import Settings, get_settings
from djcafe.core.database import Base, get_db
from djcafe.core.logging import get_logger, request_id_ctx

__all__ = [
    "Base",
    "Settings",
    "get_db",
    "get_logger",
    "get_settings",
    "request_id_ctx",
]
