"""Stylized image transformation through the remote image model."""

from __future__ import annotations

import logging

from core.errors import TransformationError
from core.models import ImagePayload
from core.providers import VisionProvider
from prompts.templates import TRANSFORMATION_PROMPT

logger = logging.getLogger(__name__)


class TransformationClient:
    """Requests the Ghibli-style rendition of an uploaded character."""

    def __init__(self, provider: VisionProvider) -> None:
        self.provider = provider

    def transform(self, payload: ImagePayload) -> str | None:
        """Return the first inline image as a data URL, or ``None`` if the model sent none."""
        try:
            parts = self.provider.generate(payload, TRANSFORMATION_PROMPT)
        except Exception as e:
            logger.error("Transformation via %s failed: %s", self.provider.provider_name, e)
            raise TransformationError(f"Transformation request failed: {e}") from e

        for part in parts:
            if part is not None:
                logger.info("Received generated image (%s)", part.media_type)
                return part.to_data_url()

        logger.warning("Transformation response contained no image among %d parts", len(parts))
        return None
