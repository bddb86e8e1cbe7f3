"""Character recognition: asks the remote model whether an image shows a subject."""

from __future__ import annotations

import logging

from core.errors import RecognitionError
from core.models import ImagePayload
from core.providers import VisionProvider
from prompts.templates import AFFIRMATIVE_TOKEN, RECOGNITION_PROMPT

logger = logging.getLogger(__name__)


def is_affirmative(text: str | None) -> bool:
    """Interpret a model answer as a verdict. Anything unclear counts as "no"."""
    if not text:
        return False
    return AFFIRMATIVE_TOKEN in text.strip().lower()


class RecognitionClient:
    """Classifies uploaded images as person/animal/character or not."""

    def __init__(self, provider: VisionProvider, prompt: str = RECOGNITION_PROMPT) -> None:
        self.provider = provider
        self.prompt = prompt

    def classify(self, payload: ImagePayload) -> bool:
        try:
            answer = self.provider.recognize(payload, self.prompt)
        except Exception as e:
            logger.error("Recognition via %s failed: %s", self.provider.provider_name, e)
            raise RecognitionError(f"Recognition request failed: {e}") from e

        verdict = is_affirmative(answer)
        logger.info("Recognition answer=%r verdict=%s", (answer or "")[:40], verdict)
        return verdict
