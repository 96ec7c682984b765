"""TV display: price board and overlay sequencing."""

from djcafe.features.display.routes import router
from djcafe.features.display.sequencer import (
    Overlay,
    OverlayKind,
    format_countdown,
    resolve_overlay,
)
from djcafe.features.display.service import DisplayService

__all__ = [
    "DisplayService",
    "Overlay",
    "OverlayKind",
    "format_countdown",
    "resolve_overlay",
    "router",
]
