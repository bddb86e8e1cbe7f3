"""Pillow helpers for upload previews and downloadable results."""

from __future__ import annotations

import io
import logging

from PIL import Image, UnidentifiedImageError

from core.encoder import decode_data_url

logger = logging.getLogger(__name__)

DOWNLOAD_FILE_NAME = "ghibli-character.png"
DOWNLOAD_MIME = "image/png"
PREVIEW_SIZE: tuple[int, int] = (640, 640)
MAX_UPLOAD_BYTES = 10 * 1024 * 1024


def within_upload_limit(size: int) -> bool:
    return 0 < size <= MAX_UPLOAD_BYTES


def open_image(raw: bytes) -> Image.Image:
    """Open image bytes with Pillow, raising ValueError for unreadable data."""
    try:
        image = Image.open(io.BytesIO(raw))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f"Not a readable image: {e}") from e
    return image


def load_preview(raw: bytes, max_size: tuple[int, int] = PREVIEW_SIZE) -> Image.Image:
    """Return a thumbnail of the upload that fits within ``max_size``."""
    preview = open_image(raw)
    if preview.mode not in ("RGB", "RGBA"):
        preview = preview.convert("RGBA")
    preview.thumbnail(max_size, Image.LANCZOS)
    return preview


def result_bytes(data_url: str) -> tuple[bytes, str]:
    """Raw bytes and media type of a generated result."""
    return decode_data_url(data_url)


def download_bytes(data_url: str) -> bytes:
    """PNG bytes for the download button, re-encoding non-PNG results."""
    raw, media_type = result_bytes(data_url)
    if media_type == DOWNLOAD_MIME:
        return raw

    image = open_image(raw)
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    logger.info("Converted %s result to PNG for download", media_type)
    return buf.getvalue()
