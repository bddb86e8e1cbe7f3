"""Serverless relay for the two Gemini operations.

The browser-facing app can run with ``CHARACTER_PROVIDER=relay`` and post here
instead of holding the Gemini API key itself. Request body::

    {"action": "recognize" | "generate", "image": {"base64": ..., "mimeType": ...}}
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache

from core.config import Settings, build_provider
from core.models import ImagePayload
from core.providers import VisionProvider
from prompts.templates import RECOGNITION_PROMPT, TRANSFORMATION_PROMPT

logger = logging.getLogger(__name__)


def _response(status_code: int, body, content_type: str = "application/json") -> dict:
    return {
        "statusCode": status_code,
        "headers": {"content-type": content_type},
        "body": json.dumps(body) if content_type == "application/json" else body,
    }


@lru_cache(maxsize=1)
def get_relay_provider() -> VisionProvider:
    settings = Settings.from_env()
    if settings.provider == "relay":
        # The relay itself must talk to Gemini directly.
        settings.provider = "gemini"
    return build_provider(settings)


def handler(event: dict, context=None, provider: VisionProvider | None = None) -> dict:
    """Serverless function handler."""
    if event.get("httpMethod") != "POST":
        return _response(405, "Method Not Allowed", content_type="text/plain")

    try:
        body = json.loads(event.get("body") or "")
    except (TypeError, ValueError):
        return _response(400, "Invalid JSON body", content_type="text/plain")

    if not isinstance(body, dict):
        return _response(400, "Missing action or image data", content_type="text/plain")

    action = body.get("action")
    image = body.get("image")
    if not action or not isinstance(image, dict) or not image.get("base64") or not image.get("mimeType"):
        return _response(400, "Missing action or image data", content_type="text/plain")
    if action not in ("recognize", "generate"):
        return _response(400, "Invalid action.", content_type="text/plain")

    payload = ImagePayload(data=image["base64"], media_type=image["mimeType"])

    try:
        provider = provider or get_relay_provider()
        if action == "recognize":
            text = provider.recognize(payload, RECOGNITION_PROMPT)
            return _response(200, {"result": text.strip().lower()})

        for part in provider.generate(payload, TRANSFORMATION_PROMPT):
            if part is not None:
                return _response(200, {"imageUrl": part.to_data_url()})
        logger.warning("Relay generate: no image data in model response")
        return _response(200, {"imageUrl": None})

    except Exception:
        logger.exception("Relay %s failed", action)
        return _response(500, {"error": "Internal Server Error"})
