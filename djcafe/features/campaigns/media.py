"""Local storage for TV media: video files, thumbnails and quick ad images.

Files live under ``settings.media_root`` and are referenced by their public
path (``/videos/x.mp4``, ``/ads/<id>.png``), which is also their path
relative to the media root.
"""

from __future__ import annotations

import base64
import binascii
import re
from pathlib import Path

from djcafe.core.config import get_settings
from djcafe.core.logging import get_logger

logger = get_logger(__name__)

DATA_URI_RE = re.compile(r"^data:image/(?P<subtype>[\w.+-]+);base64,")
ADS_DIR = "ads"
IMAGE_EXTENSIONS = {"png": "png", "jpeg": "jpg", "jpg": "jpg", "gif": "gif", "webp": "webp"}


class MediaError(Exception):
    """Invalid media path or payload."""


def image_extension(data_uri: str) -> str:
    """File extension for an image data URI (``jpeg`` -> ``jpg``, default ``png``).

    Raises:
        MediaError: If the image type is not png, jpeg, gif or webp.
    """
    match = DATA_URI_RE.match(data_uri)
    subtype = match.group("subtype").lower() if match else "png"
    try:
        return IMAGE_EXTENSIONS[subtype]
    except KeyError:
        raise MediaError(f"Unsupported image type: {subtype}") from None


def decode_data_uri(data_uri: str) -> bytes:
    """Decode a base64 image, with or without the ``data:image/...`` prefix.

    Raises:
        MediaError: If the payload is not valid base64.
    """
    raw = DATA_URI_RE.sub("", data_uri, count=1)
    try:
        return base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MediaError("Image is not valid base64 data") from e


class MediaStorage:
    """Read/write media files below a root directory."""

    def __init__(self, root_dir: Path | str | None = None) -> None:
        """Initialize with root directory.

        Args:
            root_dir: Media root. Defaults to the ``media_root`` setting.
        """
        if root_dir is None:
            root_dir = get_settings().media_root
        self.root_dir = Path(root_dir).resolve()

    def resolve(self, public_url: str) -> Path:
        """Map a public path to a file below the media root.

        Raises:
            MediaError: If the path escapes the media root.
        """
        full_path = (self.root_dir / public_url.lstrip("/")).resolve()
        try:
            full_path.relative_to(self.root_dir)
        except ValueError:
            logger.warning(
                "campaigns.media_path_traversal_attempt",
                url=public_url,
                root_dir=str(self.root_dir),
            )
            raise MediaError(f"Path outside media root: {public_url}") from None
        return full_path

    def save_ad_image(self, ad_id: str, data_uri: str) -> str:
        """Write a quick ad image and return its public path.

        Args:
            ad_id: Quick ad ID, used as the file name.
            data_uri: Base64 image, usually ``data:image/png;base64,...``.

        Returns:
            Public path such as ``/ads/<ad_id>.png``.
        """
        content = decode_data_uri(data_uri)
        public_url = f"/{ADS_DIR}/{ad_id}.{image_extension(data_uri)}"
        path = self.resolve(public_url)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

        logger.info("campaigns.ad_image_saved", url=public_url, size_bytes=len(content))
        return public_url

    def delete(self, public_url: str | None) -> bool:
        """Delete a media file; missing files are ignored.

        Returns:
            True if a file was removed.
        """
        if not public_url:
            return False
        path = self.resolve(public_url)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.info("campaigns.media_deleted", url=public_url)
        return True
