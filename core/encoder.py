"""Conversion of uploaded image bytes into transport-safe payloads."""

from __future__ import annotations

import base64
import binascii
import logging
from pathlib import Path
from typing import BinaryIO, Union

from core.errors import ReadError
from core.models import ImagePayload

logger = logging.getLogger(__name__)

ImageSource = Union[bytes, bytearray, BinaryIO, str, Path]


def _read_bytes(source: ImageSource) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if isinstance(source, (str, Path)):
        return Path(source).read_bytes()
    if hasattr(source, "seek"):
        source.seek(0)
    return source.read()


def encode_image(source: ImageSource, media_type: str) -> ImagePayload:
    """Read an image source and return it as a base64 payload.

    The media type is taken as declared by the caller; it is not sniffed from
    the bytes.
    """
    try:
        raw = _read_bytes(source)
    except (OSError, ValueError, AttributeError) as exc:
        raise ReadError(f"Could not read image source: {exc}") from exc

    if not raw:
        raise ReadError("Image source is empty.")

    logger.debug("Encoded %d bytes of %s", len(raw), media_type)
    return ImagePayload(data=base64.b64encode(raw).decode("ascii"), media_type=media_type)


def split_data_url(url: str) -> tuple[str, str]:
    """Return ``(media_type, base64_data)`` from a base64 data URL."""
    header, sep, data = url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError("Not a base64 data URL.")
    return header[len("data:"):-len(";base64")], data


def decode_data_url(url: str) -> tuple[bytes, str]:
    """Split a ``data:<type>;base64,<data>`` URL into raw bytes and media type."""
    media_type, data = split_data_url(url)
    try:
        raw = base64.b64decode(data, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"Invalid base64 payload: {exc}") from exc
    return raw, media_type
